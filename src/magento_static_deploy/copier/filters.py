"""Development file filtering.

Source packages ship build inputs, docs and tooling config next to the
assets a storefront actually serves. Unless development files are
explicitly included, anything matching one of the sets below is skipped.
Directory and file names match case-sensitively; extensions do not.
"""

from __future__ import annotations

from pathlib import PurePath

DEV_DIRECTORIES: frozenset[str] = frozenset({"node_modules", ".git", ".svn", ".hg"})

DEV_FILES: frozenset[str] = frozenset({
    # Package managers
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "composer.json",
    "composer.lock",
    # TypeScript
    "tsconfig.json",
    "tsconfig.base.json",
    "tsconfig.build.json",
    # Docs
    "LICENSE",
    "LICENSE.md",
    "LICENSE.txt",
    "MIT-LICENSE",
    "README",
    "README.md",
    "README.txt",
    "CHANGELOG",
    "CHANGELOG.md",
    "HISTORY.md",
    "CONTRIBUTING.md",
    # Tooling config
    ".gitignore",
    ".npmignore",
    ".npmrc",
    ".yarnrc",
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.json",
    ".eslintrc.cjs",
    ".prettierrc",
    ".prettierrc.js",
    ".prettierrc.json",
    ".editorconfig",
    ".jshintrc",
    ".babelrc",
    ".babelrc.js",
    ".babelrc.json",
    "babel.config.js",
    "babel.config.json",
    ".nycrc",
    ".nycrc.json",
    "jest.config.js",
    "jest.config.json",
    "karma.conf.js",
    "webpack.config.js",
    "rollup.config.js",
    "vite.config.js",
    "vite.config.ts",
    ".browserslistrc",
    ".stylelintrc",
    ".stylelintrc.json",
    "Makefile",
    "Gruntfile.js",
    "Gulpfile.js",
})

# Lower-case, without the leading dot.
DEV_EXTENSIONS: frozenset[str] = frozenset({
    "ts", "tsx", "mts", "cts",
    "less", "scss", "sass",
    "md", "markdown",
    "yml", "yaml",
    "lock",
    "npmignore", "gitignore", "eslintrc", "prettierrc", "editorconfig",
    "jshintrc", "nycrc", "babelrc", "flowconfig",
})


def _extension(name: str) -> str:
    # ".gitignore" has an extension here even though PurePath says it has none.
    _stem, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


def should_exclude(path: PurePath | str, include_dev: bool = False) -> bool:
    """Return True if ``path`` is a development file that should not be deployed."""
    if include_dev:
        return False

    path = PurePath(path)
    if any(part in DEV_DIRECTORIES for part in path.parts):
        return True

    name = path.name
    if name in DEV_FILES:
        return True

    return _extension(name) in DEV_EXTENSIONS
