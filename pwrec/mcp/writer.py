"""
ScriptWriter — 生成されたテストコードの書き出し

CodeSynthesizer は文字列を返すだけで、ファイルシステムには触れない。
本モジュールはその出力を受け取り、指定パスへ書き出すシンクである。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from ..codegen.models import GeneratedTest

logger = logging.getLogger(__name__)


class ScriptWriter:
    """生成テストをファイルへ書き出すライター。

    使用例::

        writer = ScriptWriter()
        path = writer.write(generated)
    """

    def write(self, generated: GeneratedTest) -> Path:
        """生成結果を file_path へ書き出す。

        Args:
            generated: コード生成結果

        Returns:
            書き出したファイルのパス
        """
        return self.write_text(generated.file_path, generated.test_code)

    def write_text(self, output_path: Union[str, Path], text: str) -> Path:
        """テキストを UTF-8 で書き出す。親ディレクトリは必要に応じて作成する。

        Args:
            output_path: 出力先ファイルパス
            text: 書き出す内容

        Returns:
            書き出したファイルのパス
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        logger.info("テストコードを書き出しました: %s", path)
        return path
