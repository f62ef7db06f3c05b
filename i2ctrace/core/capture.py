import csv


class CaptureError(ValueError):
    pass


def _parse_time(text):
    try:
        return int(text)
    except ValueError:
        return float(text)


def _parse_level(text):
    return 1 if int(text) else 0


def read_csv(f, scl="SCL", sda="SDA", time="Time"):
    """Iterate the (timestamp, scl, sda) samples of a CSV capture.

    The first row names the columns; `scl`, `sda` and `time` select them by label, so exports
    that call the channels "D0"/"D1" or anything else can be read as-is.
    `f` is a path or an open text file.
    """
    if isinstance(f, str):
        with open(f, newline="", encoding="utf-8-sig") as fd:
            yield from read_csv(fd, scl, sda, time)
        return

    reader = csv.reader(f)
    try:
        header = [column.strip() for column in next(reader)]
    except StopIteration:
        return
    if header:
        # byte order mark left by exports read without utf-8-sig
        header[0] = header[0].lstrip("\ufeff").strip()
    columns = []
    for label in (time, scl, sda):
        if label not in header:
            raise CaptureError(f"no column {label!r} in capture (columns: {', '.join(header)})")
        columns.append(header.index(label))

    for row in reader:
        if not row:
            continue
        try:
            t, c, d = (row[i].strip() for i in columns)
            yield _parse_time(t), _parse_level(c), _parse_level(d)
        except (IndexError, ValueError) as e:
            raise CaptureError(f"line {reader.line_num}: cannot parse {row!r}") from e


def write_csv(f, samples, scl="SCL", sda="SDA", time="Time"):
    if isinstance(f, str):
        with open(f, "w", newline="") as fd:
            return write_csv(fd, samples, scl, sda, time)
    writer = csv.writer(f)
    writer.writerow([time, scl, sda])
    count = 0
    for sample in samples:
        writer.writerow(sample)
        count += 1
    return count


def level_samples(scl_levels, sda_levels, period=1, start=0):
    """Uniformly sampled capture from two level sequences."""
    scl_levels = list(scl_levels)
    sda_levels = list(sda_levels)
    if len(scl_levels) != len(sda_levels):
        raise CaptureError(f"SCL has {len(scl_levels)} samples but SDA has {len(sda_levels)}")
    return [(start + i * period, 1 if c else 0, 1 if d else 0)
        for i, (c, d) in enumerate(zip(scl_levels, sda_levels))]
