"""
Services module for the order engine.

Layout:
- domain/: pricing, cart, dispatch, order lifecycle, kitchen queue, queries
- catalog/: menu lookups
- crm/: read-only customer directory
- audit.py: audit sink
- terminal.py: serialized store the HTTP surface talks to

Usage:
    from pos_api.services.terminal import PosTerminal
    terminal = PosTerminal(catalog, customers)
    terminal.add_item("1")
"""
