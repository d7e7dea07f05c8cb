"""분석 패키지 — 메모리 내 이슈 목록에 대한 순수 필터/집계 함수.

Analytics package — Pure filtering, aggregation and export functions over
an in-memory list of mapped issues. Nothing here touches the database;
category and branch values come from the catalog, never from code.
"""
