"""
repositories/ - SQL access
==========================
One repository per table group. Methods take plain values, return domain
models or dicts, and re-raise database errors after rolling back.
"""
