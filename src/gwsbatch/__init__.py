"""
Client side helpers around the Google Sheets batchUpdate API.
The goal is to take the fiddly parts off the caller: turning A1 notation into
the GridRange structs the API wants, queueing a pile of mutations into one
batchUpdate transaction, and backing off when Google starts answering 429.

Python dataclasses are used for the resource/request structs and most of the
logic is translating between those and the raw dicts the API client takes.

The library logs through the standard logging module and stays quiet unless
the application configures a handler.
"""
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
