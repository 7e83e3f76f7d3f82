"""
File Extension Constants

Allow-lists for created files and uploaded blobs. Keys are lowercase
dotted suffixes; compound suffixes such as ``.tar.gz`` are matched
before their shorter tails.
"""

from pathlib import Path

VALID_EXTENSIONS: dict[str, str] = {
    # Programming languages
    ".js": "JavaScript",
    ".ts": "TypeScript",
    ".tsx": "TypeScript React",
    ".jsx": "JavaScript React",
    ".py": "Python",
    ".java": "Java",
    ".cpp": "C++",
    ".c": "C",
    ".cs": "C#",
    ".rb": "Ruby",
    ".go": "Go",
    ".rs": "Rust",
    ".php": "PHP",
    ".swift": "Swift",
    ".kt": "Kotlin",
    ".scala": "Scala",
    ".r": "R",
    ".lua": "Lua",
    ".pl": "Perl",
    ".sh": "Shell Script",
    ".bash": "Bash",
    ".groovy": "Groovy",
    ".gradle": "Gradle",
    ".m": "Objective-C",
    ".mm": "Objective-C++",
    ".h": "C Header",
    ".hpp": "C++ Header",
    ".vb": "Visual Basic",
    ".vbs": "VBScript",
    ".ps1": "PowerShell",
    ".asm": "Assembly",
    ".clj": "Clojure",
    ".cljs": "ClojureScript",
    ".ex": "Elixir",
    ".exs": "Elixir Script",
    ".erl": "Erlang",
    ".hrl": "Erlang Header",
    ".fs": "F#",
    ".fsx": "F# Script",
    ".fsi": "F# Interface",
    ".ml": "OCaml",
    ".mli": "OCaml Interface",
    ".hs": "Haskell",
    ".lhs": "Literate Haskell",
    ".jl": "Julia",
    ".nim": "Nim",
    ".nims": "Nim Script",
    ".d": "D Language",
    ".dart": "Dart",
    ".pas": "Pascal",
    ".pp": "Pascal",
    ".s": "Assembly",
    # Markup, web & config
    ".html": "HTML",
    ".htm": "HTML",
    ".xml": "XML",
    ".xhtml": "XHTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".sass": "SASS",
    ".less": "LESS",
    ".json": "JSON",
    ".jsonc": "JSON with Comments",
    ".yaml": "YAML",
    ".yml": "YAML",
    ".toml": "TOML",
    ".ini": "INI",
    ".cfg": "Configuration",
    ".conf": "Configuration",
    ".config": "Configuration",
    ".properties": "Properties",
    # Documents & text
    ".pdf": "PDF",
    ".txt": "Plain Text",
    ".md": "Markdown",
    ".markdown": "Markdown",
    ".rst": "reStructuredText",
    ".tex": "LaTeX",
    ".doc": "Word Document",
    ".docx": "Word Document",
    ".odt": "OpenDocument Text",
    ".rtf": "Rich Text Format",
    ".csv": "CSV",
    ".tsv": "TSV",
    ".xlsx": "Excel Spreadsheet",
    ".xls": "Excel Spreadsheet",
    ".ods": "OpenDocument Spreadsheet",
    # Images
    ".jpg": "JPEG Image",
    ".jpeg": "JPEG Image",
    ".png": "PNG Image",
    ".gif": "GIF Image",
    ".svg": "SVG Image",
    ".ico": "Icon",
    ".webp": "WebP Image",
    ".bmp": "Bitmap Image",
    ".tiff": "TIFF Image",
    ".tif": "TIFF Image",
    ".psd": "Photoshop",
    ".ai": "Adobe Illustrator",
    # Archives
    ".zip": "ZIP Archive",
    ".rar": "RAR Archive",
    ".7z": "7-Zip Archive",
    ".tar": "TAR Archive",
    ".gz": "GZIP Archive",
    ".tar.gz": "TAR GZIP Archive",
    ".bz2": "BZIP2 Archive",
    ".xz": "XZ Archive",
    # Data
    ".sql": "SQL Script",
    ".db": "Database",
    ".sqlite": "SQLite Database",
    ".sqlite3": "SQLite Database",
    ".mdb": "Microsoft Access",
    # Dotfiles & tooling
    ".env": "Environment Variables",
    ".gitignore": "Git Ignore",
    ".gitattributes": "Git Attributes",
    ".editorconfig": "Editor Config",
    ".eslintrc": "ESLint Config",
    ".prettierrc": "Prettier Config",
    ".babelrc": "Babel Config",
    ".npmrc": "NPM Config",
    ".yarnrc": "Yarn Config",
    ".log": "Log File",
    ".lock": "Lock File",
    ".map": "Source Map",
    ".min.js": "Minified JavaScript",
    ".min.css": "Minified CSS",
}

# Longest first so compound suffixes win
_SUFFIXES_BY_LENGTH = sorted(VALID_EXTENSIONS, key=len, reverse=True)

UPLOAD_EXTENSIONS = frozenset(
    {
        ".js", ".ts", ".tsx", ".jsx", ".py", ".java", ".cpp", ".c", ".cs", ".php",
        ".html", ".css", ".json",
        ".pdf", ".txt", ".md", ".tex", ".doc", ".docx", ".csv", ".tsv", ".xlsx", ".xls", ".pptx", ".ppt",
        ".jpg", ".jpeg", ".png", ".gif",
    }
)

UPLOAD_MIME_PREFIXES = ("text/", "image/", "application/")


def resolve_extension(name: str) -> str | None:
    """Return the allow-listed suffix ``name`` ends with, or None."""
    lowered = name.strip().lower()
    for suffix in _SUFFIXES_BY_LENGTH:
        if lowered.endswith(suffix):
            return suffix
    return None


def extension_examples(count: int = 10) -> list[str]:
    return list(VALID_EXTENSIONS)[:count]


def is_uploadable(filename: str, mime_type: str | None) -> bool:
    """Uploads pass on either an allowed suffix or an allowed MIME family."""
    if Path(filename).suffix.lower() in UPLOAD_EXTENSIONS:
        return True
    return bool(mime_type) and mime_type.startswith(UPLOAD_MIME_PREFIXES)
