# vpcb

`vpcb` is a small discrete-event simulator for a virtual printed circuit
board. Peripheral models (currently UART) are attached to named traces on the
board, and JSON "data packs" are delivered to them through a pin-routed
interconnect. The resulting pin waveforms are written to a VCD trace file
that any waveform viewer can open.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Running a simulation

Run the command from a directory that holds a `netlist.json` and a
`datapack.json`:

```
vpcb
```

Options:

- `--netlist PATH` – board netlist (default `netlist.json`)
- `--datapack PATH` – data pack to send (default `datapack.json`)
- `--trace NAME` – waveform file name; `.vcd` is appended (default `wave`)
- `--log PATH` – report log file (default `report.log`)

The simulator builds the board from the netlist and, 10 us into simulated
time, sends the data pack to the device whose pins it names. The UART device
drives the bytes out on its TX pin, bit by bit at the configured baud rate,
and a receiver model samples them back. When the transaction's handshake has
completed the simulation stops; Ctrl-C stops it early. All reports, down to
debug level, are printed and appended to the log file, and pin waveforms are
written to the VCD file when the run ends.

### netlist.json

Each top-level key is a device. `pin_to_trace` maps the device's pin names to
board trace names, and `components` lists the peripherals on that device.
Only components of type `UART` are built; others are skipped.

```json
{
    "mcu": {
        "pin_to_trace": { "PA9": "T1", "PA10": "T2" },
        "components": [
            {
                "type": "UART",
                "Interface Configuration": {
                    "Pin Configuration": { "PA9": "TX", "PA10": "RX" },
                    "Baud Rate": 9600,
                    "Data Bits": 8,
                    "Parity Bit": 0,
                    "Stop Bits": 1
                }
            }
        ]
    }
}
```

A pin missing from `pin_to_trace` is reported as a warning.

### datapack.json

A data pack names the traces it is addressed to, its type, the interface
configuration the sender expects, and the data itself:

```json
{
    "pins": ["T1", "T2"],
    "beginTime": "10 ns",
    "endTime": "30 ns",
    "type": "UART",
    "Interface Configuration": {
        "Pin Configuration": { "T1": "TX", "T2": "RX" },
        "Baud Rate": 9600,
        "Data Bits": 8,
        "Parity Bit": 0,
        "Stop Bits": 1
    },
    "Data": {
        "TX": [104, 101, 108, 108, 111],
        "RX": []
    }
}
```

The interconnect delivers the pack to the first target, in pin-set order,
whose pins intersect `pins`; if none matches, a warning is reported and the
pack is dropped. The pack's `Pin Configuration` is given in trace names and
must put `TX` and `RX` on the same traces as the device does, otherwise a
"misconfigured" warning is reported and nothing is transmitted.
`beginTime` and `endTime` are optional; they are parsed and kept on the
payload. Times are written as a number and a unit (`fs`, `ps`, `ns`, `us`,
`ms`, `s`).

For UART, `Parity Bit` is 0 (none), 1 (odd) or 2 (even), `Data Bits` is 8 or
9 and `Stop Bits` is 1 or 2.

## Using the library

The building blocks are importable on their own:

```python
from vpcb.pins import Pins
from vpcb.sim import parse_time, format_time

a = Pins.from_json(["PA9", "PA10"])
b = Pins.from_json(["PA10", "PB0"])
print(a.to_string())      # {PA10, PA9}
print(a.intersect(b))     # True

print(format_time(parse_time("125 us")))   # 125 us
```

- `vpcb.sim` — the event kernel: `Simulator` (generator processes that yield
  delays or `Event`s), `ResolvedSignal` with four-valued `Logic`, `resolve`,
  `Reporter`, `VcdTrace`, `PayloadEventQueue`, `parse_time` and `format_time`.
- `vpcb.pins` — `Pins` and `PinConfig`.
- `vpcb.factory` — `register_type_factory`, `produce_data` and
  `produce_interface_config` for adding new data-pack types.
- `vpcb.payload` — `Payload.from_json` parses a data pack.
- `vpcb.uart_config` — `UartInterfaceConfig`, `UartData` and the `DataBits`,
  `ParityBit` and `StopBits` enums; importing it registers the `UART` type.
- `vpcb.target`, `vpcb.interconnect`, `vpcb.initiator` — `PcbTarget`,
  `PcbInterconnect` and `PcbInitiator`, the transaction path from sender to
  peripheral and back.
- `vpcb.uart_driver`, `vpcb.uart_hardware` — `UartDriver` (transmitter) and
  `UartHardware` (receiver; decoded bytes collect in its `received`);
  `uart_frame` gives the line levels sent for one byte.
- `vpcb.top` — `Top`, which builds the board from a netlist, and `main`, the
  `vpcb` command.
- `vpcb.socket_api` and `vpcb.bridge` — a stream-socket `Server`/`Client`
  over UNIX paths or TCP, and a `Bridge` that connects to a server and polls
  it for data once per clock period inside a simulation.

## What it does not do

- Only UART peripherals are modelled; no other component types exist.
- Bytes decoded by the UART receiver are kept on `UartHardware.received`;
  they are not written back into the data pack's `RX` field.
- The `vpcb` command does not connect to an external emulator. `Bridge` is
  available from the library only, and it just prints and collects the data
  it receives; that data is not turned into transactions on the board.