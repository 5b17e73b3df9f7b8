"""Static completion tables per language and extension based detection."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple, Union

KEYWORD_WEIGHT = 2.0
SNIPPET_WEIGHT = 2.5

Table = Tuple[Tuple[str, float], ...]


def _words(*entries: str) -> Table:
    return tuple((entry, KEYWORD_WEIGHT) for entry in entries)


def _snippets(*entries: str) -> Table:
    return tuple((entry, SNIPPET_WEIGHT) for entry in entries)


PYTHON = (
    _words(
        "if", "else:", "elif", "while", "for", "def", "class", "return",
        "import", "from", "try", "except", "finally", "raise", "with", "as",
        "in", "is", "not", "and", "or", "lambda", "yield", "async", "await",
        "break", "continue", "pass", "assert", "del", "global",
    )
    + _snippets(
        "if :\n    ",
        "while :\n    ",
        "for  in :\n    ",
        "def ():\n    ",
        "class ():\n    ",
        "try:\n    \nexcept Exception as e:\n    ",
        "async def ():\n    ",
        "@property\ndef (self):\n    ",
        "@classmethod\ndef (cls):\n    ",
        "@staticmethod\ndef ():\n    ",
    )
    + _words(
        "print()", "len()", "range()", "str()", "int()", "list()", "dict()",
        "set()", "tuple()", "float()", "bool()", "bytes()", "map()",
        "filter()", "zip()", "enumerate()", "sorted()", "reversed()", "sum()",
        "any()", "all()", "min()", "max()", "abs()",
        "import os", "import sys", "import json", "import re",
        "import pathlib", "import requests", "import numpy as np",
        "import pandas as pd", "import matplotlib.pyplot as plt",
        "from datetime import datetime",
        "from typing import List, Dict, Tuple, Optional",
        "if __name__ == '__main__':",
        "with open() as f:",
        "def __init__(self):\n    ",
        "def __str__(self):\n    ",
        "def __repr__(self):\n    ",
        "def __len__(self):\n    ",
        "def __getitem__(self, key):\n    ",
    )
)

RUST = (
    _words(
        "fn", "let", "mut", "pub", "use", "struct", "enum", "impl", "trait",
        "type", "mod", "crate", "super", "self", "Self", "where", "async",
        "await", "move", "static", "const", "extern", "unsafe", "dyn",
    )
    + _snippets(
        "fn main() {\n    \n}",
        "if  {\n    \n}",
        "while  {\n    \n}",
        "for  in  {\n    \n}",
        "match  {\n    _ => \n}",
        "struct  {\n    \n}",
        "impl  {\n    \n}",
        "enum  {\n    \n}",
        "trait  {\n    \n}",
        "async fn  {\n    \n}",
        "#[derive(Debug)]\n",
        "#[derive(Clone, Copy)]\n",
        "#[derive(PartialEq, Eq)]\n",
    )
    + _words(
        "println!()", "eprintln!()", "format!()", "Vec::new()", "vec![]",
        "String::from()", "String::new()", "to_string()", "Option<>",
        "Some()", "None", "Result<, >", "Ok()", "Err()", "Box::new()",
        "Rc::new()", "Arc::new()", "HashMap::new()", "BTreeMap::new()",
        "HashSet::new()", "BTreeSet::new()",
    )
)

JAVASCRIPT = (
    _words(
        "function", "const", "let", "var", "class", "if", "else", "for",
        "while", "do", "try", "catch", "finally", "throw", "async", "await",
        "import", "export",
    )
    + _snippets(
        "function () {\n    \n}",
        "() => {\n    \n}",
        "class  {\n    constructor() {\n        \n    }\n}",
        "if () {\n    \n}",
        "for (let i = 0; i < ; i++) {\n    \n}",
        "try {\n    \n} catch (error) {\n    \n}",
        "import { } from '';",
        "export const  = ",
    )
    + _words(
        "console.log()", "console.error()", "setTimeout(() => , )",
        "setInterval(() => , )", "Promise.resolve()", "Promise.reject()",
        "Array.from()", "Object.keys()", "Object.values()", "map()",
        "filter()", "reduce()", "forEach()", "includes()", "indexOf()",
        "join()", "split()",
    )
)

TYPESCRIPT = (
    _words(
        "interface", "type", "enum", "namespace", "readonly", "private",
        "public", "protected", "implements", "extends", "abstract", "declare",
        ": string", ": number", ": boolean", ": any", ": void", ": never",
        ": Record<, >", ": Partial<>", ": Readonly<>",
    )
    + _snippets(
        "interface  {\n    \n}",
        "type  = ",
        "enum  {\n    \n}",
        "class  implements  {\n    \n}",
        "function <T>(): T {\n    \n}",
    )
)

CPP = (
    _words(
        "class", "struct", "template", "typename", "public", "private",
        "protected", "virtual", "const", "static", "inline", "namespace",
    )
    + _snippets(
        "int main() {\n    \n    return 0;\n}",
        "class  {\npublic:\n    \n};",
        "template<typename T>\n",
        "namespace  {\n    \n}",
        "try {\n    \n} catch (const std::exception& e) {\n    \n}",
    )
    + _words(
        "#include <iostream>", "#include <string>", "#include <vector>",
        "#include <map>", "using namespace std;", "using std::string;",
        "std::cout << ", "std::endl", "std::vector<>", "std::string",
        "std::map<, >", "std::shared_ptr<>",
    )
)

GO = (
    _words(
        "func", "type", "struct", "interface", "var", "const", "package",
        "import", "go", "chan", "defer", "select",
    )
    + _snippets(
        "func main() {\n    \n}",
        "func () error {\n    \n}",
        "type  struct {\n    \n}",
        "if err != nil {\n    return err\n}",
        "for _, v := range  {\n    \n}",
    )
    + _words(
        "fmt.Println()", "fmt.Printf()", "make()", "new()", "append()",
        "len()", "cap()", "close()", "errors.New()", "panic()", "recover()",
    )
)

JAVA = (
    _words(
        "public", "private", "protected", "class", "interface", "extends",
        "implements", "static", "final", "abstract", "synchronized",
    )
    + _snippets(
        "public class  {\n    \n}",
        "public static void main(String[] args) {\n    \n}",
        "public void () {\n    \n}",
        "try {\n    \n} catch (Exception e) {\n    \n}",
        "@Override\npublic void ",
    )
    + _words(
        "import java.util.*;", "import java.io.*;", "System.out.println()",
        "System.err.println()", "List<>", "Map<, >", "Set<>", "ArrayList<>()",
        "HashMap<>()",
    )
)

CSHARP = (
    _words(
        "public", "private", "protected", "internal", "class", "interface",
        "struct", "enum", "static", "readonly", "const", "async", "await",
        "using", "namespace", "var",
    )
    + _snippets(
        "public class  {\n    \n}",
        "public static void Main(string[] args) {\n    \n}",
        "public async Task  {\n    \n}",
        "try {\n    \n} catch (Exception ex) {\n    \n}",
        "[Serializable]\npublic class ",
    )
    + _words(
        "Console.WriteLine()", "Console.ReadLine()", "List<>",
        "Dictionary<, >", "IEnumerable<>", "string.Format()", "StringBuilder",
        "Task.Run(async () => )", "await Task.WhenAll()",
    )
)

PHP = (
    _words(
        "function", "class", "public", "private", "protected", "static",
        "namespace", "use", "require", "include", "echo", "return",
    )
    + _snippets(
        "<?php\n\n",
        "function () {\n    \n}",
        "class  {\n    \n}",
        "try {\n    \n} catch (Exception $e) {\n    \n}",
    )
    + _words(
        "array()", "strlen()", "count()", "json_encode()", "json_decode()",
        "mysqli_query()", "PDO::prepare()",
    )
)

RUBY = (
    _words(
        "def", "class", "module", "attr_accessor", "require", "include",
        "extend", "private",
    )
    + _snippets(
        "def initialize\n    \nend",
        "class  < ApplicationRecord\n    \nend",
        "module \n    \nend",
        "begin\n    \nrescue => e\n    \nend",
    )
    + _words("puts ", "print ", "gets.chomp", "each do ||\n    \nend", "map { || }")
)

LANGUAGE_TABLES: Dict[str, Table] = {
    "Python": PYTHON,
    "Rust": RUST,
    "JavaScript": JAVASCRIPT,
    "TypeScript": TYPESCRIPT,
    "C++": CPP,
    "Go": GO,
    "Java": JAVA,
    "C#": CSHARP,
    "PHP": PHP,
    "Ruby": RUBY,
}

EXTENSION_LANGUAGES: Dict[str, str] = {
    "py": "Python",
    "rs": "Rust",
    "js": "JavaScript",
    "jsx": "JavaScript",
    "mjs": "JavaScript",
    "ts": "TypeScript",
    "tsx": "TypeScript",
    "cpp": "C++",
    "cc": "C++",
    "cxx": "C++",
    "hpp": "C++",
    "c": "C",
    "h": "C",
    "go": "Go",
    "java": "Java",
    "cs": "C#",
    "php": "PHP",
    "rb": "Ruby",
    "html": "HTML",
    "css": "CSS",
    "sh": "Shell",
}


def detect_language(path: Union[str, Path, None]) -> Optional[str]:
    """Language name for ``path`` by extension, or ``None`` when unknown."""

    if path is None:
        return None
    suffix = Path(path).suffix.lstrip(".").lower()
    return EXTENSION_LANGUAGES.get(suffix)


def language_table(name: Optional[str]) -> Dict[str, float]:
    """Static corpus for ``name``; empty for languages without a table."""

    if name is None:
        return {}
    return dict(LANGUAGE_TABLES.get(name, ()))


__all__ = [
    "EXTENSION_LANGUAGES",
    "KEYWORD_WEIGHT",
    "LANGUAGE_TABLES",
    "SNIPPET_WEIGHT",
    "detect_language",
    "language_table",
]
