"""ページパスの正規化と灰度サブパッケージプレフィックスの付け外し"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

SEPARATOR = "/"


def resolve_url(current_path: str, target: str) -> str:
    """遷移先パスを現在ページ基準の絶対パス（先頭スラッシュなし）に変換する。

    current_path: 現在ページの route（例: "pages/a/index"）
    target: 遷移先。"/" 始まりなら絶対パスとしてそのまま扱う。

    ルートを超えて ".." した場合も例外にはせず、残ったセグメントをそのまま返す。
    """
    if target.startswith(SEPARATOR):
        return target[len(SEPARATOR):]

    stack = current_path.split(SEPARATOR)
    stack.pop()  # 現在ページ自身のファイル名
    for part in target.split(SEPARATOR):
        if part == ".":
            continue
        if part == "..":
            if stack:
                stack.pop()
        else:
            stack.append(part)
    return SEPARATOR.join(stack)


def strip_gray_prefix(path: str, root: str) -> str:
    prefix = root + SEPARATOR
    if path.startswith(prefix):
        return path[len(prefix):]
    return path


def with_gray_prefix(path: str, root: str) -> str:
    # 二重付与はチェックしない。呼び出し側で strip_gray_prefix 済みであること
    return root + SEPARATOR + path


def split_query(url: str) -> tuple[str, str]:
    """url をパスとクエリ文字列（"?" を含む、なければ空）に分割する。"""
    path, sep, query = url.partition("?")
    return path, sep + query


def join_query(path: str, query: str) -> str:
    """split_query の逆。query は "?" の有無どちらでもよい。"""
    if not query or query == "?":
        return path
    if not query.startswith("?"):
        query = "?" + query
    return path + query


def format_query(options: Mapping[str, str]) -> str:
    """ページパラメータを "?k=v&k2=v2" 形式に整形する。値はエンコードしない。"""
    if not options:
        return ""
    return "?" + "&".join(f"{key}={value}" for key, value in options.items())


def is_gray_page(path: str, gray_pages: Iterable[str]) -> bool:
    """パスが灰度版を持つページ（プレフィックス一致）かどうか。"""
    return any(path.startswith(page) for page in gray_pages)
