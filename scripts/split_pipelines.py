#!/usr/bin/env python3
"""
Точка входа: разделение лога на цепочки пайплайнов.

Использование:
    # Вывести цепочки в stdout
    python scripts/split_pipelines.py input.log

    # Показать все предупреждения (пропущенные записи, незавершённые цепочки)
    python scripts/split_pipelines.py input.log -v

    # Строгий режим: первая ошибка прерывает обработку
    python scripts/split_pipelines.py input.log --strict

    # Записать результат в файл (JSON)
    python scripts/split_pipelines.py input.log -o result.json --json
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional, TextIO

from loguru import logger

# Добавляем корень проекта в путь
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import LOG_FORMAT, LOG_LEVEL, validate_config
from src.domain.exceptions import PipelinesError
from src.domain.policy import ErrorPolicy
from src.organizing.split_by_pipeline import SplitByPipeline, SplitResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Split an interleaved log into pipeline chains")
    parser.add_argument("infile", help="Входной файл с записями")
    parser.add_argument("-v", "--verbose", action="store_true", help="Показать все предупреждения")
    parser.add_argument(
        "-s", "--strict", action="store_true",
        help="Строгий режим: любая ошибка завершает программу с кодом 1"
    )
    parser.add_argument("-o", "--output", metavar="OUTFILE", help="Записать результат в файл")
    parser.add_argument("--json", action="store_true", help="Вывод в JSON (SplitResultDTO)")
    return parser


def render_payload(payload) -> str:
    """ascii - как есть, hex16 - значения по 4 hex-цифры."""
    if isinstance(payload, str):
        return payload
    return " ".join(f"{value:04X}" for value in payload)


def render_text(result: SplitResult) -> str:
    lines: List[str] = []
    for number, chain in enumerate(result.chains, start=1):
        lines.append(f"Pipeline {number}")
        for message in chain.messages:
            lines.append(f"    {message.id}| {render_payload(message.payload)}")
        if not chain.is_complete:
            lines.append(f"    ...| (waiting for {chain.awaited_id})")
    return "\n".join(lines) + ("\n" if lines else "")


def write_output(text: str, output: Optional[str], stdout: TextIO) -> None:
    if output:
        with open(output, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info(f"[split_pipelines] Результат записан: {output}")
    else:
        stdout.write(text)


def main(argv: Optional[List[str]] = None, stdout: TextIO = sys.stdout, stderr: TextIO = sys.stderr) -> int:
    """Главная функция. Возвращает код завершения."""
    args = build_parser().parse_args(argv)

    logger.remove()
    logger.add(stderr, format=LOG_FORMAT, level="INFO" if args.verbose else LOG_LEVEL)

    policy = ErrorPolicy.ABORT_ON_FIRST_ERROR if args.strict else ErrorPolicy.SKIP_AND_CONTINUE

    try:
        validate_config()
        result = SplitByPipeline(error_policy=policy).run_file(Path(args.infile))
    except PipelinesError as e:
        stderr.write(f"[ERROR] Обработка прервана: {e}\n")
        return 1
    except (OSError, ValueError) as e:
        stderr.write(f"[ERROR] {e}\n")
        return 1

    if args.verbose and result.has_errors:
        stderr.write(
            f"[WARN] При обработке {args.infile} найдены проблемы, "
            f"результат может быть неполным:\n"
        )
        for error in result.errors:
            stderr.write(f"  {error.kind.value}: {error}\n")

    if not result.chains:
        stderr.write("[ERROR] Во входном файле не найдено ни одного сообщения (попробуйте -v)\n")
        return 1

    text = result.to_dto().model_dump_json(indent=2) + "\n" if args.json else render_text(result)
    try:
        write_output(text, args.output, stdout)
    except OSError as e:
        stderr.write(f"[ERROR] Не удалось записать результат: {e}\n")
        return 1

    if args.strict and result.has_errors:
        stderr.write(f"[ERROR] Строгий режим: найдено ошибок: {len(result.errors)}\n")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
