"""레포지토리 패키지 — 데이터베이스 쿼리 계층.

Repository package — Database queries for KRA catalog, job-specific KRA and
rating tables. Each repository extends BaseRepository and adds the lookups
its service needs.
"""
