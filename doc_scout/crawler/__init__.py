# doc_scout/crawler/__init__.py
"""
Загрузка и обход: fetchers, фильтры области и шаблонов, AsyncCrawler.

AsyncCrawler импортируется из ``doc_scout.crawler.crawler`` напрямую:
конвейеры сами зависят от моделей этого пакета.
"""
