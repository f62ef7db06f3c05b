import io
import unittest
from i2ctrace.core.capture import read_csv, write_csv, level_samples
from i2ctrace.core.decoder import Decoder, Diagnostic, Phase, TextEvent, ByteEvent
from i2ctrace.core.models import I2cBus, I2cDevice, I2cTransaction
from i2ctrace.core.session import decode, format_result
from i2ctrace.core.waveform import WaveformBuilder, transaction_samples


class TestDecode(unittest.TestCase):
    def setUp(self):
        self.eeprom = I2cDevice(I2cBus(), 0x50)

    def test_timelines(self):
        samples = transaction_samples([self.eeprom.write([0x00, 0x42])])
        result = decode(samples)
        self.assertEqual([v for _, v in result.data], [0x50, 0x00, 0x42])
        self.assertEqual([v for _, v in result.events], [
            "START", "ADDRESS", "WRITE", "ACK", "DATA", "ACK", "DATA", "ACK", "STOP",
        ])
        self.assertEqual(result.data.name, "I2CData")
        self.assertEqual(result.events.name, "I2CEvents")
        self.assertEqual(result.samples, len(samples))
        self.assertEqual(result.last_time, samples[-1][0])
        self.assertEqual(result.diagnostics, [])
        self.assertEqual(result.dropped, 0)

    def test_events_list_order(self):
        samples = transaction_samples([self.eeprom.read([0x7E])])
        events = decode(samples).events_list()
        self.assertEqual([type(e).__name__ for e in events[:3]],
            ["TextEvent", "TextEvent", "ByteEvent"])
        address, data = [e for e in events if isinstance(e, ByteEvent)]
        self.assertEqual(address.value, 0x50)
        self.assertEqual(data.value, 0x7E)
        i = events.index(data)
        self.assertEqual(events[i + 1], TextEvent(data.timestamp, "DATA"))

    def test_transactions(self):
        transactions = [
            self.eeprom.write([0x00, 0x10, 0x20]),
            self.eeprom.read([0xDE, 0xAD]),
            I2cTransaction(0x21, False, [0x01], acks=[1, 1]),  # nobody home
            I2cTransaction(0x50, False, [0x00], complete=False),
            I2cTransaction(0x50, True, [0xBE], restarted=True),
        ]
        result = decode(transaction_samples(transactions, period=8))
        self.assertEqual(result.transactions(), transactions)
        self.assertEqual(result.diagnostics, [])

    def test_capacity(self):
        samples = transaction_samples([self.eeprom.write([0x00, 0x42])])
        result = decode(samples, capacity=3)
        self.assertEqual(result.events.position, 3)
        self.assertEqual(result.data.position, 3)
        self.assertEqual(result.dropped, 6)
        self.assertEqual([e.tag for e in result.events_list() if isinstance(e, TextEvent)],
            ["START", "ADDRESS", "WRITE"])

    def test_capacity_transactions(self):
        # the tag timeline fills during the first STOP, bytes of the second write still fit
        samples = transaction_samples([self.eeprom.write([0x01]), self.eeprom.write([0x02])])
        result = decode(samples, capacity=6)
        self.assertEqual(result.data.position, 4)
        self.assertEqual(result.truncated, 8)
        self.assertEqual(result.transactions(),
            [I2cTransaction(0x50, False, [0x01], complete=False)])
        self.assertIsNone(decode(samples).truncated)

    def test_correlation_time(self):
        samples = transaction_samples([self.eeprom.write([0x42])], start=1000)
        result = decode(samples, correlation_time=1000)
        self.assertEqual(result.events.compact()[0], (1, "START"))
        self.assertEqual(result.events_list()[0], TextEvent(1001, "START"))

    def test_diagnostics(self):
        seen = []
        samples = level_samples([1, 0, 1, 0], [1, 1, 1, 1])
        result = decode(samples, on_diagnostic=seen.append)
        expected = [Diagnostic(2, Phase.IDLE, 0, 1, 1, 1)]
        self.assertEqual(seen, expected)
        self.assertEqual(result.diagnostics, expected)
        self.assertEqual(len(result.events), 0)

    def test_diagnostics_logged(self):
        samples = level_samples([1, 0, 1], [1, 1, 1])
        with self.assertLogs("i2ctrace.core.session", level="WARNING") as cm:
            decode(samples)
        self.assertEqual(len(cm.output), 1)
        self.assertIn("unhandled transition at 2: phase=IDLE", cm.output[0])

    def test_given_decoder(self):
        d = Decoder()
        wb = WaveformBuilder()
        wb.start()
        wb.byte(0x50, bits=7)
        decode(wb.samples, decoder=d)
        self.assertEqual(d.phase, Phase.READ_DIRECTION)

    def test_csv_capture(self):
        f = io.StringIO()
        write_csv(f, transaction_samples([self.eeprom.write([0x99])], period=20), scl="D0", sda="D1")
        f.seek(0)
        result = decode(read_csv(f, scl="D0", sda="D1"))
        self.assertEqual(result.transactions(), [self.eeprom.write([0x99])])

    def test_format_result(self):
        samples = transaction_samples([self.eeprom.write([0x42])])
        lines = format_result(decode(samples))
        self.assertEqual(lines[0].split(), ["1", "START"])
        self.assertEqual(lines[1].split()[1], "ADDRESS")
        self.assertEqual(lines[2].split()[1], "0x50")
        self.assertEqual(lines[-1].split()[1], "STOP")

        lines = format_result(decode(level_samples([1, 0, 1], [1, 1, 1])))
        self.assertEqual(lines, [
            "warning: unhandled transition at 2: phase=IDLE, lastSCL=0, lastSDA=1, scl=1, sda=1",
        ])
