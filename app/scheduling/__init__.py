"""
Scheduling core: conflict detection, slot generation, availability and the
appointment / time slot lifecycles. Depends only on repository protocols.
"""
