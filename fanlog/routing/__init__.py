"""fanlog routing — broadcasts log records to all registered sinks.

Sinks are pluggable destinations: standard output, a remote collector
reached over TCP, a queued wrapper around either, or another
broadcaster.  The Broadcaster fans each record out to every registered
sink in registration order.
"""
