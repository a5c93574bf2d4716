"""State-owning managers for the tab workspace.

Managers never raise for unknown ids; they log and leave state unchanged.
Configuration mistakes (such as a capacity below one) raise ``ValueError``.
"""
