"""
Shared, cross-cutting code for the API.

`core/` holds small building blocks that the listing endpoints share
(DB wiring, logging, display-time formatting). Keep listing SQL and
filter rules in `listings/`.
"""
