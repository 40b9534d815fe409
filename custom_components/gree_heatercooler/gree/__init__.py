"""Gree UDP protocol sub-package.

This package is intentionally free of any Home Assistant dependencies so that
it can be unit-tested in isolation and reused by the command-line tool.

Sub-modules
-----------
commands   – Attribute vocabulary (wire codes and enumerated values).
crypto     – AES/ECB ``pack`` encryption with the generic or session key.
protocol   – Envelope/payload builders and the inbound datagram parser.
transport  – UDP socket bound to the per-unit local port.
device     – Device record, binding state machine and command methods.
"""
