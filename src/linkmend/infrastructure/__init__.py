"""Infrastructure layer — parser adapter, workspace manager, edit applicator.

This layer owns all file I/O. It depends on stdlib and the domain types;
it must never import from services, commands, or output.
"""
