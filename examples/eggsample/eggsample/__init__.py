"""Eggsample: pluggy's docs example rebuilt on named events.

Run it with::

    evrun examples/eggsample
"""
