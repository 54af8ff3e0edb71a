"""
Integration tests for the contract runner.

These tests run the directory loader, the runner and the CLI end to end
against an in-process fake hub (httpx.MockTransport), so no network or real
hub is needed.

Test Categories:
- Directory fetch: single fetch, setup failures
- Runner: status/command outcomes, skips, isolation, timeouts
- CLI: exit codes and report artifacts
"""
