from __future__ import annotations

import codecs
import csv
import io
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import IO, Any

import pandas as pd

from ..models.config_models import CsvConfig
from ..models.header_schema import (
    COURSE,
    DAY,
    END_TIME,
    GROUP,
    ROOM,
    SPECIALTY,
    START_TIME,
    SUBJECT,
    TEACHER,
    HeaderSchema,
)
from ..models.import_result import SourceType
from ..models.raw_row import RawRow
from .base import SourceUnreachable, TabularSource, to_cells

"""CSV source reader.

- 1行目をヘッダ行として扱い、2行目以降をデータ行 (行番号 = エディタ上の行番号)
- エンコーディング / 区切り文字は先頭バイトから自動判定 (設定で固定可)
- pandas の chunksize で逐次読み込み。全セルを文字列として保持し NA 変換はしない
"""

__all__ = [
    "SAMPLE_BYTES",
    "detect_delimiter",
    "detect_encoding",
    "open_csv_source",
    "render_csv_template",
]

SAMPLE_BYTES = 64 * 1024
_DELIMITERS = (",", ";", "\t")

_TEMPLATE_ROWS: tuple[dict[str, str], ...] = (
    {
        COURSE: "1", SPECIALTY: "ИС", GROUP: "ИС-101", DAY: "Понедельник",
        START_TIME: "09:00", END_TIME: "10:30", SUBJECT: "Математика",
        TEACHER: "Иванов И.И.", ROOM: "305",
    },
    {
        COURSE: "2", SPECIALTY: "ПО", GROUP: "ПО-201", DAY: "Вторник",
        START_TIME: "11:00", END_TIME: "12:30", SUBJECT: "Программирование",
        TEACHER: "Петров О.В.", ROOM: "412",
    },
)


def detect_encoding(sample: bytes, candidates: tuple[str, ...]) -> str:
    """Return the first candidate encoding that decodes ``sample``.

    The sample may end in the middle of a multi-byte sequence, so decoding
    uses an incremental decoder without flushing.

    Raises:
        SourceUnreachable: no candidate decodes the sample
    """
    for enc in candidates:
        try:
            codecs.getincrementaldecoder(enc)().decode(sample, final=False)
        except (UnicodeDecodeError, LookupError):
            continue
        return enc
    raise SourceUnreachable(f"unable to decode CSV with encodings: {', '.join(candidates)}")


def detect_delimiter(text: str) -> str:
    """Pick the most frequent of comma, semicolon and tab in the first lines.

    Comma wins ties.
    """
    head = "\n".join(text.splitlines()[:3])
    counts = {d: head.count(d) for d in _DELIMITERS}
    best = max(_DELIMITERS, key=lambda d: (counts[d], d == ","))
    return best if counts[best] > 0 else ","


def _open_binary(source: str | Path | IO[bytes]) -> tuple[IO[bytes], str, bool]:
    """Return (binary stream, display name, owned)."""
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise SourceUnreachable(f"CSV file not found: {path}")
        if not path.is_file():
            raise SourceUnreachable(f"CSV path is not a file: {path}")
        try:
            return path.open("rb"), path.name, True
        except OSError as e:
            raise SourceUnreachable(f"CSV file unreadable: {path}: {e}") from e
    name = str(getattr(source, "name", "<stream>"))
    try:
        seekable = source.seekable()
    except (AttributeError, ValueError):
        seekable = False
    if not seekable:
        # 判定用に先頭を読むため seek 可能なバッファへ退避
        try:
            return io.BytesIO(source.read()), name, True
        except (OSError, ValueError) as e:
            raise SourceUnreachable(f"CSV stream unreadable: {e}") from e
    return source, name, False


def _header_width(text: str, delimiter: str) -> int:
    first_line = text.splitlines()[0] if text else ""
    return max(len(next(csv.reader([first_line], delimiter=delimiter), [])), 1)


def _text_cell(value: object) -> str | None:
    # 短い行の不足セルは pandas が None で埋める
    return value if isinstance(value, str) else None


def _truncate_to(width: int) -> Callable[[list[str]], list[str]]:
    # ヘッダより列が多い行: 余剰セルを切り捨て (行単位エラーにはしない)
    def _truncate(bad_line: list[str]) -> list[str]:
        return bad_line[:width]

    return _truncate


def open_csv_source(
    source: str | Path | IO[bytes],
    *,
    config: CsvConfig | None = None,
    name: str | None = None,
) -> TabularSource:
    """Open a CSV file or binary stream as a TabularSource.

    The header row and the first non-blank data row are read eagerly so that
    unreadable or empty sources fail here; remaining chunks are read as the
    row iterator is consumed. Call TabularSource.close() to release the file
    when the rows are not read to the end.

    Parameters
    ----------
    source: ファイルパス または バイナリストリーム
    config: CSV 読み込み設定 (None なら既定値)
    name: 表示名 (ログ・監査用)。None ならファイル名

    Raises
    ------
    SourceUnreachable: file not found / unreadable / undecodable / empty
    """
    cfg = config or CsvConfig()
    stream, display_name, owned = _open_binary(source)
    try:
        try:
            sample = stream.read(SAMPLE_BYTES)
            stream.seek(0)
        except (OSError, ValueError) as e:
            raise SourceUnreachable(f"CSV stream unreadable: {e}") from e
        if not sample or not sample.strip():
            raise SourceUnreachable(f"CSV source is empty: {display_name}")

        if cfg.encoding == "auto":
            encoding = detect_encoding(sample, cfg.encodings)
        else:
            encoding = cfg.encoding
        try:
            text = codecs.getincrementaldecoder(encoding)(errors="replace").decode(sample)
        except LookupError as e:
            raise SourceUnreachable(f"unknown CSV encoding: {encoding}") from e
        delimiter = detect_delimiter(text) if cfg.delimiter == "auto" else cfg.delimiter

        width = _header_width(text, delimiter)
        try:
            reader = pd.read_csv(
                stream,
                sep=delimiter,
                header=None,
                converters={i: _text_cell for i in range(width)},
                keep_default_na=False,
                na_filter=False,
                skip_blank_lines=False,
                encoding=encoding,
                engine="python",
                on_bad_lines=_truncate_to(width),
                chunksize=cfg.chunk_size,
            )
            first = next(reader)
        except StopIteration as e:
            raise SourceUnreachable(f"CSV source is empty: {display_name}") from e
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, LookupError, csv.Error) as e:
            raise SourceUnreachable(f"CSV file unreadable: {display_name}: {e}") from e
    except SourceUnreachable:
        if owned:
            stream.close()
        raise

    header = to_cells(first.iloc[0].tolist())
    rows = _iter_rows(first.iloc[1:], reader, stream if owned else None, display_name)
    # 空行のみのファイルもデータなし扱い (終端に達した時点で stream は閉じられる)
    first_row = next(rows, None)
    if first_row is None:
        raise SourceUnreachable(f"CSV source has no data rows: {display_name}")

    return TabularSource(
        name=name or display_name,
        source_type=SourceType.CSV,
        header=header,
        rows=_chain_rows(first_row, rows),
        on_close=stream.close if owned else None,
    )


def _chain_rows(first_row: RawRow, rest: Iterator[RawRow]) -> Iterator[RawRow]:
    try:
        yield first_row
        yield from rest
    finally:
        close = getattr(rest, "close", None)
        if callable(close):
            close()


def _iter_rows(
    first_chunk: pd.DataFrame,
    reader: Any,
    owned_stream: IO[bytes] | None,
    display_name: str,
) -> Iterator[RawRow]:
    """Yield RawRows chunk by chunk.

    DataFrame index counts CSV records from 0 (the header), so position is
    index + 1. Blank records are skipped without renumbering the rest.
    """
    try:
        chunk: pd.DataFrame | None = first_chunk
        while chunk is not None:
            for index, values in zip(chunk.index, chunk.itertuples(index=False, name=None)):
                row = RawRow(position=int(index) + 1, cells=to_cells(list(values)))
                if row.is_blank():
                    continue
                yield row
            try:
                chunk = next(reader)
            except StopIteration:
                chunk = None
            except (pd.errors.ParserError, UnicodeDecodeError, csv.Error) as e:
                raise SourceUnreachable(f"CSV file unreadable: {display_name}: {e}") from e
    finally:
        if owned_stream is not None:
            owned_stream.close()


def render_csv_template(schema: HeaderSchema) -> str:
    """Downloadable CSV template: schema header plus two sample rows."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(schema.column_names)
    for sample in _TEMPLATE_ROWS:
        writer.writerow([sample.get(name, "") for name in schema.column_names])
    return buf.getvalue()
