"""
FlowReader core package.

`flow_reader.parsing` turns markup (HTML, or PDF/DOCX through Docling) into an
immutable sequence of typed blocks and stores, indexes and imports those
sequences. `flow_reader.reading` maps reading positions between pacing
(block, word), RSVP chunk and canonical word-count representations, and
tracks per-document progress behind an asyncio FIFO mutex.
"""
