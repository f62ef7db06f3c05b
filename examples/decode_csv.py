#!/usr/bin/env python3

import argparse
import logging
from i2ctrace.core.capture import read_csv
from i2ctrace.core.session import decode, format_result


if __name__ == '__main__':
    parser = argparse.ArgumentParser("Decode the I2C traffic of a CSV capture")
    parser.add_argument("capture", help="CSV file with a header row")
    parser.add_argument("--scl", default="SCL", help="label of the SCL column")
    parser.add_argument("--sda", default="SDA", help="label of the SDA column")
    parser.add_argument("--time", default="Time", help="label of the timestamp column")
    parser.add_argument("--capacity", type=int, default=None,
        help="maximum number of events per timeline")
    parser.add_argument("--correlation-time", type=float, default=0,
        help="time subtracted from every timestamp")
    parser.add_argument("--transactions", "-t", action="store_true",
        help="print one line per transaction instead of one per event")
    args = parser.parse_args()

    logging.basicConfig(format="%(levelname)s: %(message)s")

    # event listings print diagnostics inline, transaction listings log them
    result = decode(read_csv(args.capture, scl=args.scl, sda=args.sda, time=args.time),
        capacity=args.capacity, correlation_time=args.correlation_time,
        on_diagnostic=None if args.transactions else (lambda d: None))

    if args.transactions:
        for t in result.transactions():
            print(f"{t}")
    else:
        for line in format_result(result):
            print(line)
    if result.dropped:
        print(f"{result.dropped} events dropped (capacity={args.capacity})")
