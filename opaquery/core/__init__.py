# opaquery/core/__init__.py
"""
Core query pipeline.

- decoder: input stream -> documents
- composer: documents + metadata -> payload
- client: payload -> decision service -> result
- encoder: result -> output stream
- exit: result + fail flags -> ExitSignal
- pipeline: the stages above, in order

No side effects on import.
"""
