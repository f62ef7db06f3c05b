from migen import passive

from i2ctrace.core.decoder import ByteEvent, TextEvent, Diagnostic


@passive
def timeout(timeout):
    """ wait for `timeout` cycles, then raise an exception
    Useful as a global infinite loop protection
    """
    for _ in range(timeout):
        yield
    raise Exception(f"timeout after {timeout} cycles")


def assert_eq_before(signal, value, timeout):
    """Return when `signal`==`value`
    If the assertion wasn't True before `timeout` cycles, raise an exception
    """
    for _ in range(timeout):
        if (yield signal) == value:
            return
        yield
    raise Exception(f"timeout waiting for {signal}=={value} after {timeout} cycles")


def drive_samples(pads, samples, tail=4, scl="scl_i", sda="sda_i"):
    """Play (timestamp, scl, sda) samples on `pads`, one sample per cycle.
    Timestamps are ignored. `tail` idle cycles are added so the last event can be observed.
    """
    for _, scl_level, sda_level in samples:
        yield getattr(pads, scl).eq(scl_level)
        yield getattr(pads, sda).eq(sda_level)
        yield
    for _ in range(tail):
        yield


@passive
def ep_record(ep, beats, fields, ready=1):
    """Consume a stream Endpoint, appending the `fields` of every beat to `beats`
    If `ready` is 0, the endpoint is never ready: nothing is consumed, but presented beats are
    still recorded.
    """
    yield ep.ready.eq(ready)
    while True:
        yield
        if (yield ep.valid):
            beat = []
            for f in fields:
                beat.append((yield getattr(ep, f)))
            beats.append(tuple(beat))


@passive
def signal_record(signal, values):
    """Record the value of `signal` on every cycle."""
    while True:
        yield
        values.append((yield signal))


def untimed(events):
    """Drop timestamps so event sequences from different time bases compare equal."""
    result = []
    for e in events:
        if isinstance(e, ByteEvent):
            result.append(("byte", e.value))
        elif isinstance(e, TextEvent):
            result.append(("text", e.tag))
        elif isinstance(e, Diagnostic):
            result.append(("diag", e.phase, e.last_scl, e.last_sda, e.scl, e.sda))
    return result
