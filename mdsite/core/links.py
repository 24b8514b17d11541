"""
链接改写模块 - 将 Markdown 源文件之间的链接改写为站点链接

规则：
1. 页内锚点与带协议的 URL 保持不变
2. README.* / index.* 指向所在目录
3. *.md 改为 *.html
4. 其他相对路径改为仓库中的绝对链接
"""

import posixpath
import re
from typing import Optional

from mdsite.core.config import ConversionConfig


SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]*:")
INDEX_RE = re.compile(r"(?:README|index)\.[^/]*")


def _split_anchor(target: str) -> tuple[str, str]:
    """分离路径和锚点，锚点保留 ``#``"""
    if "#" in target:
        path, anchor = target.split("#", 1)
        return path, "#" + anchor
    return target, ""


def rewrite_link(
    target: str,
    doc_path: Optional[str],
    config: Optional[ConversionConfig] = None,
) -> str:
    """
    改写链接目标

    Args:
        target: 链接目标
        doc_path: 当前文档相对于站点根目录的路径
        config: 转换配置，提供仓库 URL

    Returns:
        改写后的链接目标
    """
    config = config or ConversionConfig()
    if not target or target.startswith("#") or target.startswith("//"):
        return target
    if SCHEME_RE.match(target):
        return target

    path, anchor = _split_anchor(target)
    directory, name = posixpath.split(path)

    if INDEX_RE.fullmatch(name):
        return (directory + "/" if directory else "./") + anchor
    if name.endswith(".md"):
        return path[:-len(".md")] + ".html" + anchor

    base = posixpath.dirname(doc_path or "")
    resolved = posixpath.normpath(posixpath.join(base, path))
    if path.endswith("/") and not resolved.endswith("/"):
        resolved += "/"
    return config.repo_url + resolved + anchor
