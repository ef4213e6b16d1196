# doc_scout/report/json_report.py

"""
Генерация JSON-отчёта для проекта DocScout.

Сериализация объекта ScrapeReport в файл.
"""
import json
from pathlib import Path

from doc_scout.aggregator import ScrapeReport


def render_json(report: ScrapeReport, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт report в формате JSON по указанному пути.

    :param report: объект ScrapeReport с результатами обхода
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2 пробела вместо компактной записи
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open("w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None, default=str)

    return output
