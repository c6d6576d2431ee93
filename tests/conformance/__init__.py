"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of pass settlement.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Split and double-entry conservation
2. access.py - Role gating and permanently disabled transfers
3. payment.py - Exact payment and monotonic pass balances
4. atomicity.py - All-or-nothing purchases and mutations
5. idempotency.py - Duplicate execution handling
6. determinism.py - Replay and content-addressed intents
7. temporal.py - Reconstruction of past states

These tests use hypothesis for property-based testing.
"""
