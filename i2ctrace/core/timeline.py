class TimelineError(ValueError):
    pass


class Timeline:
    """Time-tagged output track, filled slot by slot.

    Parameters:
    - name: label of the track (e.g. "I2CData")
    - capacity: None or int - number of slots. Writes past the last slot are dropped.
    - width: None or int - bits per value for "integral" tracks, characters for "text" tracks
    - kind: "integral" or "text"
    - correlation_time: time bias. Stored times are relative to it.

    Times must never go backwards; equal times are accepted since one sample can produce several
    annotations.
    """
    def __init__(self, name, capacity=None, width=None, kind="integral", correlation_time=0):
        if kind not in ("integral", "text"):
            raise TimelineError(f"unknown timeline kind {kind!r}")
        self.name = name
        self.capacity = capacity
        self.width = width
        self.kind = kind
        self.correlation_time = correlation_time
        self._entries = []

    @property
    def position(self):
        return len(self._entries)

    @property
    def unused(self):
        if self.capacity is None:
            return None
        return self.capacity - len(self._entries)

    @property
    def last_time(self):
        if not self._entries:
            return None
        return self._entries[-1][0]

    def _check_value(self, value):
        if self.kind == "integral":
            if not isinstance(value, int) or value < 0:
                raise TimelineError(f"{self.name}: {value!r} is not an unsigned integer")
            if self.width is not None and value >> self.width:
                raise TimelineError(f"{self.name}: {value:#x} does not fit in {self.width} bits")
        else:
            if not isinstance(value, str):
                raise TimelineError(f"{self.name}: {value!r} is not a string")
            if self.width is not None and len(value) > self.width:
                raise TimelineError(f"{self.name}: {value!r} is longer than {self.width} characters")

    def replace_next(self, time, value):
        """Write `value` at `time` in the next free slot. Return False if the timeline is full."""
        self._check_value(value)
        time -= self.correlation_time
        last = self.last_time
        if last is not None and time < last:
            raise TimelineError(f"{self.name}: time going backwards ({time} < {last})")
        if self.capacity is not None and len(self._entries) >= self.capacity:
            return False
        self._entries.append((time, value))
        return True

    def compact(self):
        """Used entries only, unused capacity filtered out."""
        return list(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        size = "" if self.capacity is None else f"/{self.capacity}"
        return f"Timeline({self.name}, {self.position}{size})"
