"""Core decoding, transformation, and caption model modules.

WHY: The core package holds all CEA-608 protocol knowledge and the caption
model every other layer consumes. It must stay free of file I/O and output
format details.

HOW: grid.py and timecode.py define value types, decoder.py replays the SCC
byte stream into grid snapshots, transformer.py turns snapshots into
caption trees defined in ir.py, errors.py holds the error hierarchy.

RULES:
- Caption model (ir.py) is the contract: change with care
- Decoder and transformer are pure: no shared state between calls
- No formatter-specific logic here
"""
