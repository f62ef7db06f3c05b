class WaveformBuilder:
    """Synthesize the (timestamp, scl, sda) samples an I2C master would produce.

    Every level change is one sample, `period / 4` after the previous one, like a master
    stepping its pads each quarter of the SCL period. SDA only moves while SCL is low, except
    for START and STOP.

    |       |   SDA   |   SCL   |
    |-------|---------|---------|
    | START | 1 -> 0  |  1      |
    | bit   | b       |  0 1 0  |
    | STOP  | 0 -> 1  |  0 1    |
    """
    def __init__(self, period=4, start=0):
        self.step = period // 4 if period % 4 == 0 else period / 4
        self.time = start
        self.scl = 1
        self.sda = 1
        self.samples = []

    def _set(self, scl=None, sda=None):
        if scl is not None:
            self.scl = scl
        if sda is not None:
            self.sda = sda
        self.samples.append((self.time, self.scl, self.sda))
        self.time += self.step

    def idle(self, count=1):
        for _ in range(count):
            self._set()

    def start(self):
        """START, or repeated START if SCL is low (transfer in progress)."""
        if not self.scl:
            self._set(sda=1)
            self._set(scl=1)
        self._set(sda=0)
        self._set(scl=0)

    def stop(self):
        if self.scl:
            self._set(scl=0)
        self._set(sda=0)
        self._set(scl=1)
        self._set(sda=1)

    def bit(self, b):
        self._set(sda=1 if b else 0)
        self._set(scl=1)
        self._set(scl=0)

    def byte(self, value, bits=8):
        for shift in range(bits - 1, -1, -1):
            self.bit((value >> shift) & 1)

    def transaction(self, t):
        """Write I2cTransaction `t`: START, address + direction, ACKs and data, then STOP if
        `t.complete` is set."""
        acks = t.wire_acks()
        self.start()
        self.byte(t.address, bits=7)
        self.bit(1 if t.read else 0)
        self.bit(acks[0] if acks else 0)
        for i, data in enumerate(t.data):
            self.byte(data)
            self.bit(acks[i + 1] if i + 1 < len(acks) else 0)
        if t.complete:
            self.stop()
        return self


def transaction_samples(transactions, period=4, start=0, idle=1):
    wb = WaveformBuilder(period, start)
    wb.idle(idle)
    for t in transactions:
        wb.transaction(t)
        if t.complete:
            wb.idle(idle)
    return wb.samples
