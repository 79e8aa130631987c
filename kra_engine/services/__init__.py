"""서비스 패키지 — KRA 평가 비즈니스 로직 계층.

Service package — Business logic for the KRA catalog, job-specific KRAs,
rating submissions and rollups. Services flush through repositories and
leave the commit to the caller that owns the session.
"""
