"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that multiple features use
(DB wiring, settings, logging, feed pagination). Keep feature-specific
behavior in the corresponding feature package (e.g. `videos/`) and storage
queries in `storage/`.
"""
