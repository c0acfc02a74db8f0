"""
リテラル変換 — パラメータ値を Python ソースのリテラルに変換

生成コード中の文字列はダブルクォートで囲み、構文を壊す文字
（バックスラッシュ、ダブルクォート、改行、制御文字）をエスケープする。
ast.literal_eval で読み戻すと元の値と一致する。
"""

from __future__ import annotations

import math
from typing import Any

# 個別にエスケープ表記を持つ文字
_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_string(s: str) -> str:
    """ダブルクォート文字列リテラル用にエスケープする。

    Args:
        s: エスケープ対象の文字列

    Returns:
        クォートを含まないエスケープ済み文字列
    """
    out: list[str] = []
    for ch in s:
        escaped = _ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
        elif ch.isprintable():
            out.append(ch)
        else:
            # 制御文字・行区切り文字（U+2028 等）・サロゲートは数値エスケープ
            code = ord(ch)
            if code <= 0xFF:
                out.append(f"\\x{code:02x}")
            elif code <= 0xFFFF:
                out.append(f"\\u{code:04x}")
            else:
                out.append(f"\\U{code:08x}")
    return "".join(out)


def string_literal(s: str) -> str:
    """文字列をダブルクォートの Python リテラルに変換する。"""
    return f'"{escape_string(s)}"'


def py_literal(value: Any) -> str:
    """JSON 互換の値を Python リテラル表記に変換する。

    Args:
        value: str / bool / int / float / None / list / tuple / dict

    Returns:
        Python リテラル文字列

    Raises:
        TypeError: リテラル化できない型が含まれる場合
    """
    # bool は int のサブクラスのため先に判定する
    if value is None or isinstance(value, bool):
        return repr(value)
    if isinstance(value, str):
        return string_literal(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return 'float("nan")'
        if math.isinf(value):
            return 'float("inf")' if value > 0 else 'float("-inf")'
        return repr(value)
    if isinstance(value, list):
        return "[" + ", ".join(py_literal(v) for v in value) + "]"
    if isinstance(value, tuple):
        if len(value) == 1:
            return f"({py_literal(value[0])},)"
        return "(" + ", ".join(py_literal(v) for v in value) + ")"
    if isinstance(value, dict):
        items = ", ".join(
            f"{py_literal(k)}: {py_literal(v)}" for k, v in value.items()
        )
        return "{" + items + "}"
    raise TypeError(f"リテラルに変換できない型です: {type(value).__name__}")


def describe_value(value: Any) -> str:
    """コメント用に値を1行の文字列で表現する。

    リテラル化できない値は repr を1行に潰して返す。
    """
    try:
        return py_literal(value)
    except TypeError:
        return escape_string(repr(value))
