#!/usr/bin/env python3

import argparse
from migen import Module, If
from migen.build.generic_platform import Subsignal, Pins
from migen.build.platforms.icestick import Platform
from i2ctrace.core.sniffer import (
    I2cSniffer, I2cSnifferPads, EVENT_START_ODD, EVENT_NACK, EVENT_UNHANDLED,
)


_ios = [
    ("i2c", 0,
        Subsignal("sda", Pins("PMOD:3")),
        Subsignal("scl", Pins("PMOD:2")),
    ),
    ("i2c_clear", 0, Pins("PMOD:7")),
]


class Top(Module):
    """Bus monitor on the iCEstick LEDs.

    - LED0: transfer in progress
    - LED1: a NACK was seen
    - LED2: a START was seen in the middle of a transfer
    - LED3: bits were clocked on an idle bus
    - LED4: toggles on every bus event
    Pulling PMOD:7 low clears LED1-3.
    """
    def __init__(self, platform):
        platform.add_extension(_ios)
        leds = [platform.request("user_led", i) for i in range(5)]
        clear = platform.request("i2c_clear")

        self.submodules.pads = pads = I2cSnifferPads(platform.request("i2c"))
        self.submodules.sniffer = sniffer = I2cSniffer(pads)
        source = sniffer.source

        self.comb += [
            source.ready.eq(1),
            leds[0].eq(sniffer.busy),
        ]
        self.sync += [
            If(source.valid,
                leds[4].eq(~leds[4]),
                If(source.kind == EVENT_NACK,
                    leds[1].eq(1),
                ),
                If(source.kind == EVENT_START_ODD,
                    leds[2].eq(1),
                ),
                If(source.kind == EVENT_UNHANDLED,
                    leds[3].eq(1),
                ),
            ),
            If(~clear,
                leds[1].eq(0),
                leds[2].eq(0),
                leds[3].eq(0),
            ),
        ]


if __name__ == '__main__':
    parser = argparse.ArgumentParser("Icestick I2C sniffer")
    parser.add_argument("--build", "-b", action="store_true", help="build the FPGA")
    parser.add_argument("--flash", "-f", action="store_true", help="flash the FPGA")
    args = parser.parse_args()

    plat = Platform()

    soc = Top(platform=plat)

    if args.build:
        plat.build(soc, build_dir="build/icestick")
    if args.flash:
        plat.create_programmer().flash(0, "build/icestick/top.bin")
