"""
Contract tests against a live HitePro hub.

These tests run the device contract table against the hub named by the
HITEPRO_BASE_URL, HITEPRO_USER and HITEPRO_PASS environment variables (or a
.env file in the working directory). They are deselected by default.

Test Categories:
- Status: every device type reports a status of the expected shape and range
- Command: control commands are acknowledged with the literal "Command send"

Usage:
    pytest -m contract
    pytest -m contract -k dimmer
"""
