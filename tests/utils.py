"""Test utilities for the latextree test suite.

This module provides sample LaTeX documents and helpers for temporary
directories and tree inspection shared across tests.
"""

import shutil
import tempfile
from pathlib import Path

from latextree.tree import Node

SAMPLE_ARTICLE = r"""\documentclass[11pt,a4paper]{article}
\usepackage[T1]{fontenc}
\usepackage{amsmath,graphicx}
%__useTexLiveVersion{2023}
\newcommand{\R}{\mathbb{R}}
\def\half{\frac{1}{2}}

\title{A Short \emph{Note}}
\author{Ada Lovelace \and Charles Babbage}
\date{1843}

\begin{document}
\maketitle

\begin{abstract}
We describe the Analytical Engine.
\end{abstract}

\section{Introduction} % the opening section
Let $x \in \R$ and consider
\begin{equation}
  f(x) = \half x^2
\end{equation}
Use \verb|\foo| for literals~and $$a + b$$ for display.

\begin{verbatim}
\end{itemize} is not parsed here {
\end{verbatim}

\bibliography{refs,more}
\end{document}
"""


def create_test_temp_dir() -> Path:
    """Create a temporary directory for test files."""
    return Path(tempfile.mkdtemp())


def cleanup_test_dir(temp_dir: Path) -> None:
    """Clean up test directory and files."""
    if temp_dir.exists():
        shutil.rmtree(temp_dir)


def kinds(nodes: list[Node]) -> list[str]:
    """Return the kind names of a list of nodes."""
    return [node.kind.value for node in nodes]


def count_nodes(root: Node) -> int:
    """Count every node beneath ``root``, delimiters included."""
    return sum(1 for _ in root.iter_nodes())
