"""서비스 패키지 — 비즈니스 로직 계층.

Service package — Business logic layer.
Contains all service classes that orchestrate business rules over the
engine in ``navwarn.core``. Services call repositories for DB operations;
routers own the transaction boundary (commit).
"""
