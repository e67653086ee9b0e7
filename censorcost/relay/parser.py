"""
Relay parser — Загрузка delivered payload bid traces MEV-Boost relay

Вход: JSON-массив bid traces (формат data API relay). Каждый trace
проверяется контрактом relay_bid_trace и превращается в SlotRecord.

Правила:
- slot и value — десятичные строки; value — целое произвольной точности (wei)
- value, не являющееся неотрицательным base-10 целым → MissingValue
- нарушение контракта (нет slot, не тот тип) → RelayParseError с индексом
- пустой файл или невалидный JSON → RelayParseError
- каталог: все *.json файлы; ошибка любого файла прерывает загрузку;
  итоговые записи сортируются по slot глобально

Выход всегда отсортирован по slot_number (инвариант ingestion-слоя, на
который опираются движки).
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as ModelValidationError

from censorcost.core.contracts import RelayBidTraceValidator
from censorcost.core.domain.slot_record import SlotRecord
from censorcost.core.errors import MissingValue, RelayParseError

log = logging.getLogger(__name__)

_DECIMAL_INTEGER = re.compile(r"[0-9]+")


def _parse_value(raw: str, index: int) -> int:
    if not _DECIMAL_INTEGER.fullmatch(raw):
        raise MissingValue(f"trace {index}: bid value {raw!r} is not a non-negative base-10 integer")
    try:
        return int(raw, 10)
    except ValueError as e:
        # Лимит длины int-строки интерпретатора (sys.set_int_max_str_digits)
        raise MissingValue(f"trace {index}: bid value has {len(raw)} digits, too long to convert") from e


def _parse_slot(raw: str, index: int) -> int:
    try:
        return int(raw, 10)
    except ValueError as e:
        raise RelayParseError(f"trace {index}: slot has {len(raw)} digits, outside u64 range") from e


def parse_relay_traces(traces: Iterable[Mapping[str, Any]]) -> list[SlotRecord]:
    """
    Конверсия relay bid traces в упорядоченные SlotRecord.

    Args:
        traces: Последовательность bid traces (dict)

    Returns:
        Список SlotRecord, отсортированный по slot_number

    Raises:
        RelayParseError: Если trace нарушает контракт (все нарушения в одном сообщении)
        MissingValue: Если value не парсится как неотрицательное целое
    """
    validator = RelayBidTraceValidator()
    records = []

    for index, trace in enumerate(traces):
        violations = [error.message for error in validator.iter_errors(trace)]
        if violations:
            raise RelayParseError(f"trace {index}: {'; '.join(violations)}")

        value = _parse_value(trace["value"], index)
        try:
            record = SlotRecord(
                slot_number=_parse_slot(trace["slot"], index),
                bid_value=value,
                builder_identity=trace.get("builder_pubkey"),
            )
        except ModelValidationError as e:
            raise RelayParseError(f"trace {index}: {e}") from e
        records.append(record)

    records.sort(key=lambda record: record.slot_number)
    return records


def parse_relay_file(path: str | Path) -> list[SlotRecord]:
    """
    Загрузка одного JSON файла relay.

    Args:
        path: Путь к файлу с JSON-массивом bid traces

    Returns:
        Список SlotRecord, отсортированный по slot_number

    Raises:
        RelayParseError: Если файл пустой, не JSON, не массив или нарушает контракт
        MissingValue: Если value не парсится
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    if not content.strip():
        raise RelayParseError(f"{path}: empty file")

    try:
        payload = json.loads(content)
    except json.JSONDecodeError as e:
        raise RelayParseError(f"{path}: invalid JSON: {e}") from e

    if not isinstance(payload, list):
        raise RelayParseError(f"{path}: expected a JSON array of bid traces")

    try:
        records = parse_relay_traces(payload)
    except RelayParseError as e:
        raise RelayParseError(f"{path}: {e}") from e

    log.info("loaded %d slot records from %s", len(records), path)
    return records


def parse_relay_directory(path: str | Path) -> list[SlotRecord]:
    """
    Загрузка всех *.json файлов каталога.

    Файлы читаются в лексикографическом порядке, записи всех файлов
    сортируются по slot_number глобально.

    Raises:
        RelayParseError: Если путь не каталог или любой файл невалиден
        MissingValue: Если value в любом файле не парсится
    """
    path = Path(path)
    if not path.is_dir():
        raise RelayParseError(f"{path}: not a directory")

    records = []
    files = sorted(p for p in path.iterdir() if p.is_file() and p.suffix == ".json")
    for file in files:
        records.extend(parse_relay_file(file))

    records.sort(key=lambda record: record.slot_number)
    log.info("loaded %d slot records from %d files in %s", len(records), len(files), path)
    return records


def load_records(path: str | Path) -> list[SlotRecord]:
    """Загрузка записей из файла или каталога."""
    path = Path(path)
    if path.is_dir():
        return parse_relay_directory(path)
    return parse_relay_file(path)
