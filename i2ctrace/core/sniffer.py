from migen import Module, Signal, If, FSM, NextState, NextValue, Cat
from migen.genlib.cdc import MultiReg
from litex.soc.interconnect import stream

from i2ctrace.core.decoder import (
    TAGS, START, START_ODD, STOP, ADDRESS, WRITE, READ, ACK, NACK, DATA,
    ByteEvent, TextEvent, Diagnostic, Phase,
)


EVENT_START = TAGS.index(START)
EVENT_START_ODD = TAGS.index(START_ODD)
EVENT_STOP = TAGS.index(STOP)
EVENT_ADDRESS = TAGS.index(ADDRESS)
EVENT_WRITE = TAGS.index(WRITE)
EVENT_READ = TAGS.index(READ)
EVENT_ACK = TAGS.index(ACK)
EVENT_NACK = TAGS.index(NACK)
EVENT_DATA = TAGS.index(DATA)
EVENT_UNHANDLED = 0xF

i2c_event_layout = [
    ("kind", 4),
    ("data", 8),
    ("timestamp", 32),
]


class I2cSnifferPads(Module):
    """Input-only pads: the sniffer never drives the bus."""
    def __init__(self, pads):
        # Outputs
        self.sda_i, self.scl_i = Signal(reset=1), Signal(reset=1)

        # # #
        self.specials += MultiReg(pads.sda, self.sda_i, reset=1)
        self.specials += MultiReg(pads.scl, self.scl_i, reset=1)


class I2cSniffer(Module):
    """Passively decode the I2C bus seen on `pads`, one sample per clock cycle.

    Parameters:
    - pads: object with `scl_i` and `sda_i` signals, already synchronized (see I2cSnifferPads)

    Outputs:
    - source: stream.Endpoint(i2c_event_layout) - one beat per bus event
      - kind: index of the event tag in i2ctrace.core.decoder.TAGS, or EVENT_UNHANDLED
      - data: address (EVENT_ADDRESS) or data byte (EVENT_DATA). For EVENT_UNHANDLED, the
        levels as Cat(sda, scl, last_sda, last_scl)
      - timestamp: clock cycle of the event
    - overflow: a beat was presented while `source.ready` was cleared. That beat is lost.
    - busy: a transfer is in progress (a START was seen, no STOP yet)

    NOTE: there is no buffering. Connect a FIFO if the consumer can apply backpressure.
    """
    def __init__(self, pads):
        # outputs
        self.source = source = stream.Endpoint(i2c_event_layout)
        self.overflow = overflow = Signal()
        self.busy = busy = Signal()

        # # #
        scl = pads.scl_i
        sda = pads.sda_i
        prev_scl = Signal(reset=1)
        prev_sda = Signal(reset=1)
        start = Signal()
        stop = Signal()
        bit = Signal()
        timestamp = Signal(32)
        shreg = Signal(8)
        bitcnt = Signal(max=8)

        self.sync += [
            prev_scl.eq(scl),
            prev_sda.eq(sda),
            timestamp.eq(timestamp + 1),
        ]
        # SCL low (falling edge, data setup) never produces anything. With SCL high, a change
        # with SCL already high is a START or a STOP, else it is a rising edge.
        self.comb += [
            If(scl & ((scl ^ prev_scl) | (sda ^ prev_sda)),
                If(prev_scl & prev_sda & ~sda,
                    start.eq(1),
                ).Elif(prev_scl & ~prev_sda & sda,
                    stop.eq(1),
                ).Else(
                    bit.eq(1),
                ),
            ),
            source.timestamp.eq(timestamp),
            overflow.eq(source.valid & ~source.ready),
        ]

        def emit(kind, data=None):
            statements = [source.valid.eq(1), source.kind.eq(kind)]
            if data is not None:
                statements.append(source.data.eq(data))
            return statements

        def reset_bits():
            return [NextValue(bitcnt, 0), NextValue(shreg, 0)]

        def bus_condition(start_kind, *on_bit):
            # START and STOP are valid in every state
            return If(start,
                *emit(start_kind),
                *reset_bits(),
                NextState("READ_ADDR"),
            ).Elif(stop,
                *emit(EVENT_STOP),
                NextState("IDLE"),
            ).Elif(bit,
                *on_bit,
            )

        self.submodules.fsm = fsm = FSM("IDLE")
        fsm.act("IDLE",
            bus_condition(EVENT_START,
                *emit(EVENT_UNHANDLED, Cat(sda, scl, prev_sda, prev_scl)),
            ),
        )
        fsm.act("READ_ADDR",
            bus_condition(EVENT_START_ODD,
                NextValue(shreg, Cat(sda, shreg[:7])),
                NextValue(bitcnt, bitcnt + 1),
                If(bitcnt == 6,
                    *emit(EVENT_ADDRESS, Cat(sda, shreg[:6])),
                    *reset_bits(),
                    NextState("READ_RW"),
                ),
            ),
        )
        fsm.act("READ_RW",
            bus_condition(EVENT_START_ODD,
                If(sda,
                    *emit(EVENT_READ),
                ).Else(
                    *emit(EVENT_WRITE),
                ),
                NextState("READ_ACK"),
            ),
        )
        fsm.act("READ_ACK",
            bus_condition(EVENT_START_ODD,
                If(sda,
                    *emit(EVENT_NACK),
                ).Else(
                    *emit(EVENT_ACK),
                ),
                *reset_bits(),
                NextState("READ_DATA"),
            ),
        )
        fsm.act("READ_DATA",
            bus_condition(EVENT_START_ODD,
                NextValue(shreg, Cat(sda, shreg[:7])),
                NextValue(bitcnt, bitcnt + 1),
                If(bitcnt == 7,
                    *emit(EVENT_DATA, Cat(sda, shreg[:7])),
                    *reset_bits(),
                    NextState("READ_ACK"),
                ),
            ),
        )
        self.comb += busy.eq(~fsm.ongoing("IDLE"))


def sniffer_events(kind, data, timestamp):
    """Translate an I2cSniffer beat into the values Decoder.step returns."""
    if kind == EVENT_UNHANDLED:
        return [Diagnostic(timestamp, Phase.IDLE,
            (data >> 3) & 1, (data >> 2) & 1, (data >> 1) & 1, data & 1)]
    tag = TAGS[kind]
    if tag == ADDRESS:
        return [TextEvent(timestamp, tag), ByteEvent(timestamp, data)]
    if tag == DATA:
        return [ByteEvent(timestamp, data), TextEvent(timestamp, tag)]
    return [TextEvent(timestamp, tag)]
