"""Services Layer — the imperative shell around the pure retirement core.

Invariants:
    - Services own transactions; core functions never touch the database
    - Every service receives its session scope by injection

Design Decisions:
    - One file per concern (repositories, evaluator, triggers, sweep) for locality
"""
