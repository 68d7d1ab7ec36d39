"""Funções auxiliares para ler CNPJs de planilhas e gravar os dados cadastrais."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TypedDict

from openpyxl import load_workbook
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from .providers.base import LookupResult
from .utils.logging_setup import setup_logger

_BASE_LOGGER = setup_logger()
LOGGER = _BASE_LOGGER.getChild("excel_io")


class RowData(TypedDict):
    """Representação de uma linha lida da planilha."""

    index: int
    cnpj: str


_WORKBOOK_CACHE: dict[str, Workbook] = {}


def _get_or_load_workbook(excel_path: str) -> Workbook:
    """Retorna a pasta de trabalho em cache, carregando-a na primeira vez."""

    workbook = _WORKBOOK_CACHE.get(excel_path)
    if workbook is None:
        LOGGER.debug("Carregando pasta de trabalho: %s", excel_path)
        workbook = load_workbook(excel_path)
        _WORKBOOK_CACHE[excel_path] = workbook
    return workbook


def _normalise_column(column: str | None) -> str | None:
    if column is None:
        return None
    column = column.strip().upper()
    return column or None


def _cell_to_string(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        # CNPJ digitado como número perde os zeros à esquerda
        value_str = str(int(value)).zfill(14)
    elif isinstance(value, int):
        value_str = str(value).zfill(14)
    else:
        value_str = str(value).strip()
    return value_str or None


def _read_cell(worksheet: Worksheet, column: str | None, row_index: int) -> str | None:
    column = _normalise_column(column)
    if not column:
        return None
    cell = worksheet[f"{column}{row_index}"]
    return _cell_to_string(cell.value)


def _find_last_row_with_value(worksheet: Worksheet, column: str, start_row: int) -> int:
    for row_idx in range(worksheet.max_row, start_row - 1, -1):
        if _read_cell(worksheet, column, row_idx) is not None:
            return row_idx
    return start_row - 1


def _get_worksheet(workbook: Workbook, sheet: str | None) -> Worksheet:
    if sheet:
        try:
            return workbook[sheet]
        except KeyError as exc:
            raise ValueError(f"Planilha '{sheet}' não encontrada") from exc
    return workbook.active


def iter_rows(
    excel_path: str,
    sheet: str,
    start: int,
    end: int | None,
    cnpj_col: str,
) -> Iterator[RowData]:
    """Lê as linhas da planilha e devolve os CNPJs não vazios."""

    workbook = _get_or_load_workbook(excel_path)
    worksheet = _get_worksheet(workbook, sheet)
    normalised_col = _normalise_column(cnpj_col)
    if not normalised_col:
        raise ValueError("Coluna de CNPJ deve ser informada")

    stop = end if end is not None else _find_last_row_with_value(worksheet, normalised_col, start)

    LOGGER.info("Lendo linhas %s-%s da planilha '%s' (%s)", start, stop, sheet, excel_path)

    def _generator() -> Iterator[RowData]:
        yielded = 0
        if stop < start:
            LOGGER.info("Nenhuma linha de dados na planilha '%s' (%s)", sheet, excel_path)
            return

        for row_idx in range(start, stop + 1):
            value = _read_cell(worksheet, normalised_col, row_idx)
            if value is None:
                continue
            yielded += 1
            yield RowData(index=row_idx, cnpj=value)

        LOGGER.info("Linhas processadas na planilha '%s' (%s): %s", sheet, excel_path, yielded)

    return _generator()


def write_result(
    excel_path: str,
    sheet: str,
    row_index: int,
    result: LookupResult,
    mapping: Mapping[str, str],
) -> None:
    """Grava os campos de *result* nas colunas mapeadas."""

    workbook = _get_or_load_workbook(excel_path)
    worksheet = _get_worksheet(workbook, sheet)

    LOGGER.debug(
        "Gravando resultado da linha %s na planilha '%s' (%s)",
        row_index,
        sheet,
        excel_path,
    )

    record = result.as_dict()
    for key, column in mapping.items():
        column_letter = _normalise_column(column)
        if not column_letter or key not in record:
            continue
        value = record.get(key)
        worksheet[f"{column_letter}{row_index}"] = "" if value is None else str(value)


def write_error(
    excel_path: str,
    sheet: str,
    row_index: int,
    column: str,
    message: str,
) -> None:
    """Grava a mensagem de erro na coluna indicada."""

    column_letter = _normalise_column(column)
    if not column_letter:
        return
    workbook = _get_or_load_workbook(excel_path)
    worksheet = _get_worksheet(workbook, sheet)
    worksheet[f"{column_letter}{row_index}"] = message
    LOGGER.debug("Linha %s marcada com erro: %s", row_index, message)


def save(excel_path: str) -> None:
    """Persiste as alterações em disco."""

    workbook = _WORKBOOK_CACHE.get(excel_path)
    if workbook is None:
        LOGGER.debug("Nenhuma pasta de trabalho em cache para: %s", excel_path)
        return
    LOGGER.info("Salvando pasta de trabalho: %s", excel_path)
    workbook.save(excel_path)


def reset() -> None:
    """Esvazia o cache de pastas de trabalho (principalmente para testes)."""

    LOGGER.debug("Esvaziando cache de pastas de trabalho")
    _WORKBOOK_CACHE.clear()


__all__ = [
    "RowData",
    "iter_rows",
    "reset",
    "save",
    "write_error",
    "write_result",
]
