from i2ctrace.core.decoder import (
    ByteEvent, TextEvent, START, START_ODD, STOP, ADDRESS, WRITE, READ, ACK, NACK,
)


class I2cBus:
    def __init__(self):
        pass


class I2cTransaction:
    """One START ... STOP exchange with a single device.

    - address: 7-bit device address, None if the transfer ended before the address was read
    - read: True for read transfers, None if the direction bit was never seen
    - data: payload bytes, in wire order
    - acks: ACK bits in wire order, address ACK first (0=Acknowledge, 1=Not acknowledge).
      None lets the waveform synthesizer pick the usual values.
    - restarted: opened by a START seen while another transfer was in progress
    - complete: closed by a STOP
    """
    def __init__(self, address, read, data=None, acks=None, start_time=None, stop_time=None,
            restarted=False, complete=True):
        self.address = address
        self.read = read
        self.data = list(data) if data is not None else []
        self.acks = list(acks) if acks is not None else None
        self.start_time = start_time
        self.stop_time = stop_time
        self.restarted = restarted
        self.complete = complete

    def wire_acks(self):
        """ACK bits to put on the wire: the explicit ones, else the conventional ones.

        The addressed device acknowledges its address and every byte written to it. On reads
        the master acknowledges every byte but the last one.
        """
        if self.acks is not None:
            return list(self.acks)
        if self.read:
            return [0] + [0] * max(len(self.data) - 1, 0) + [1] * min(len(self.data), 1)
        return [0] * (len(self.data) + 1)

    def __eq__(self, other):
        if not isinstance(other, I2cTransaction):
            return NotImplemented
        return (self.address, self.read, self.data, self.wire_acks(), self.restarted,
            self.complete) == (other.address, other.read, other.data, other.wire_acks(),
            other.restarted, other.complete)

    def __repr__(self):
        start = "Sr" if self.restarted else "S"
        address = "0x??" if self.address is None else f"0x{self.address:02X}"
        direction = "?" if self.read is None else ("R" if self.read else "W")
        data = ", ".join(f"0x{b:02X}" for b in self.data)
        stop = " P" if self.complete else ""
        return f"{address} {start} {direction}[{data}]{stop}"


class I2cDevice:
    def __init__(self, bus: I2cBus, address):
        self.address = address

    def raw_address_bytes(self, read=False):
        return [(self.address << 1) | (1 if read else 0)]

    def write(self, data, acks=None):
        return I2cTransaction(self.address, False, data, acks)

    def read(self, data, acks=None):
        """`data` is what the device puts on the bus."""
        return I2cTransaction(self.address, True, data, acks)


def group_transactions(events):
    """Fold a decoder event stream into I2cTransaction records.

    Diagnostics are ignored, so is anything seen outside of a START ... STOP window.
    A transaction still open at the end of the stream is returned with `complete=False`.
    """
    transactions = []
    current = None
    expect_address = False

    for event in events:
        if isinstance(event, TextEvent):
            if event.tag in (START, START_ODD):
                if current is not None:
                    current.complete = False
                    transactions.append(current)
                current = I2cTransaction(None, None, acks=[], start_time=event.timestamp,
                    restarted=event.tag == START_ODD, complete=False)
                expect_address = False
            elif current is None:
                continue
            elif event.tag == STOP:
                current.stop_time = event.timestamp
                current.complete = True
                transactions.append(current)
                current = None
            elif event.tag == ADDRESS:
                expect_address = True
            elif event.tag in (WRITE, READ):
                current.read = event.tag == READ
            elif event.tag in (ACK, NACK):
                current.acks.append(0 if event.tag == ACK else 1)
        elif isinstance(event, ByteEvent) and current is not None:
            if expect_address:
                current.address = event.value
                expect_address = False
            else:
                current.data.append(event.value)

    if current is not None:
        transactions.append(current)
    return transactions
