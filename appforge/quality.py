"""Code quality enhancement of generated projects.

Post-processes a :class:`~appforge.models.GenerationResult` with lint,
formatter, strict type-checker and test-scaffold configuration, and merges
the matching scripts and dev-dependencies into ``package.json``.

Enhancement is idempotent: files are upserted by path, and the manifest is
updated through :func:`merge_manifest`, a pure reducer, so enhancing an
already-enhanced result yields the same result.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Iterable, Optional

import yaml

from appforge.config import QualityConfig
from appforge.generators.base import json_content
from appforge.generators.templates import TemplateRenderer
from appforge.models import GeneratedFile, GenerationResult

JEST_FRAMEWORKS = frozenset({"react-native"})
FLUTTER = "flutter"

# Directory aliased as ``@/`` by the strict tsconfig, per framework.
SOURCE_ROOTS: dict[str, str] = {
    "react": "src",
    "nextjs": ".",
    "svelte": "src",
    "react-native": ".",
    "electron": "src",
    "tauri": "src",
}

STRICT_COMPILER_OPTIONS: dict[str, Any] = {
    "strict": True,
    "noImplicitAny": True,
    "strictNullChecks": True,
    "strictFunctionTypes": True,
    "strictBindCallApply": True,
    "strictPropertyInitialization": True,
    "noImplicitThis": True,
    "alwaysStrict": True,
    "useUnknownInCatchVariables": True,
    "noUnusedLocals": True,
    "noUnusedParameters": True,
    "exactOptionalPropertyTypes": True,
    "noImplicitReturns": True,
    "noFallthroughCasesInSwitch": True,
    "noUncheckedIndexedAccess": True,
    "noImplicitOverride": True,
    "noPropertyAccessFromIndexSignature": True,
    "forceConsistentCasingInFileNames": True,
}

PRETTIER_CONFIG: dict[str, Any] = {
    "semi": True,
    "trailingComma": "es5",
    "singleQuote": True,
    "printWidth": 100,
    "tabWidth": 2,
    "useTabs": False,
    "bracketSpacing": True,
    "arrowParens": "always",
}

BASE_LINT_RULES: dict[str, Any] = {
    "no-console": "warn",
    "prefer-const": "error",
    "no-var": "error",
    "object-shorthand": "error",
    "prefer-template": "error",
    "eqeqeq": ["error", "always"],
    "@typescript-eslint/no-unused-vars": ["warn", {"argsIgnorePattern": "^_"}],
}


# ---------------------------------------------------------------------------
# Manifest merging
# ---------------------------------------------------------------------------

MERGEABLE_SECTIONS = ("scripts", "dependencies", "devDependencies")


def merge_manifest(existing: dict[str, Any], additions: dict[str, Any]) -> dict[str, Any]:
    """Return *existing* with the mergeable sections of *additions* folded in.

    Only ``scripts``, ``dependencies`` and ``devDependencies`` are merged;
    keys in *additions* win.  Neither argument is mutated, and
    ``merge_manifest(merge_manifest(m, a), a) == merge_manifest(m, a)``.
    """
    merged = copy.deepcopy(existing)
    for section in MERGEABLE_SECTIONS:
        patch = additions.get(section)
        if not patch:
            continue
        current = dict(merged.get(section) or {})
        current.update(patch)
        merged[section] = current
    return merged


def upsert_files(files: Iterable[GeneratedFile], additions: Iterable[GeneratedFile]) -> list[GeneratedFile]:
    """Replace entries whose path already exists, append the rest in order."""
    result = list(files)
    index = {f.path: i for i, f in enumerate(result)}
    for generated in additions:
        if generated.path in index:
            result[index[generated.path]] = generated
        else:
            index[generated.path] = len(result)
            result.append(generated)
    return result


# ---------------------------------------------------------------------------
# Scripts and dependencies
# ---------------------------------------------------------------------------

def runner_for(framework: str) -> Optional[str]:
    """``vitest``, ``jest`` or ``flutter_test``."""
    if framework == FLUTTER:
        return "flutter_test"
    if framework in JEST_FRAMEWORKS:
        return "jest"
    return "vitest"


def quality_scripts(config: QualityConfig, framework: str, strict: bool = False) -> dict[str, str]:
    """``package.json`` scripts for the enabled quality tools."""
    if framework == FLUTTER:
        return {}

    scripts: dict[str, str] = {}
    checks: list[str] = []

    if config.enable_lint:
        extensions = ".ts,.tsx,.js,.jsx" + (",.svelte" if framework == "svelte" else "")
        scripts["lint"] = f"eslint . --ext {extensions}"
        scripts["lint:fix"] = f"eslint . --ext {extensions} --fix"
        checks.append("npm run lint")

    if config.enable_format:
        scripts["format"] = "prettier --write ."
        scripts["format:check"] = "prettier --check ."
        checks.append("npm run format:check")

    if strict:
        if framework == "svelte":
            scripts["typecheck"] = "svelte-check --tsconfig ./tsconfig.json"
        else:
            scripts["typecheck"] = "tsc --noEmit"
        checks.append("npm run typecheck")

    if config.enable_testing:
        if runner_for(framework) == "jest":
            scripts["test"] = "jest"
            scripts["test:run"] = "jest --ci"
            scripts["test:coverage"] = "jest --coverage"
        else:
            scripts["test"] = "vitest"
            scripts["test:run"] = "vitest run"
            scripts["test:coverage"] = "vitest run --coverage"
        checks.append("npm run test:run")

    if checks:
        scripts["quality:check"] = " && ".join(checks)
    return scripts


def quality_dev_dependencies(config: QualityConfig, framework: str) -> dict[str, str]:
    """Dev-dependencies required by the files :class:`CodeQualityEnhancer` emits."""
    if framework == FLUTTER:
        return {}

    deps: dict[str, str] = {}

    if config.enable_lint:
        deps["eslint"] = "^8.57.0"
        deps["@typescript-eslint/parser"] = "^7.3.1"
        deps["@typescript-eslint/eslint-plugin"] = "^7.3.1"
        if framework == "react":
            deps["eslint-plugin-react"] = "^7.34.1"
            deps["eslint-plugin-react-hooks"] = "^4.6.0"
        elif framework == "nextjs":
            deps["eslint-config-next"] = "14.1.4"
        elif framework == "svelte":
            deps["eslint-plugin-svelte"] = "^2.35.1"
            deps["svelte-eslint-parser"] = "^0.33.1"
        elif framework == "react-native":
            deps["@react-native/eslint-config"] = "0.73.2"

    if config.enable_format:
        deps["prettier"] = "^3.2.5"
        if framework == "svelte":
            deps["prettier-plugin-svelte"] = "^3.2.2"
        if config.enable_lint:
            deps["eslint-config-prettier"] = "^9.1.0"

    if config.enable_testing:
        if runner_for(framework) == "jest":
            deps["jest"] = "^29.7.0"
            deps["babel-jest"] = "^29.7.0"
            deps["@types/jest"] = "^29.5.12"
            deps["react-test-renderer"] = "18.2.0"
            deps["@types/react-test-renderer"] = "^18.0.7"
        else:
            deps["vitest"] = "^1.4.0"
            deps["@vitest/coverage-v8"] = "^1.4.0"
            deps["jsdom"] = "^24.0.0"
            if framework in ("react", "nextjs"):
                deps["@vitejs/plugin-react"] = "^4.2.1"
                deps["@testing-library/react"] = "^14.2.2"
                deps["@testing-library/jest-dom"] = "^6.4.2"
            elif framework == "svelte":
                deps["@testing-library/svelte"] = "^4.1.0"
                deps["@testing-library/jest-dom"] = "^6.4.2"

    return deps


# ---------------------------------------------------------------------------
# Enhancer
# ---------------------------------------------------------------------------

class CodeQualityEnhancer:
    """Adds lint, format, strict typing and test scaffolding to a result.

    Args:
        config: Which tools to add.  Strict typing is enabled per call by the
            ``strict_feature`` flag appearing in the requested features.
        renderer: Template renderer for test scaffolds.
    """

    def __init__(
        self,
        config: QualityConfig | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config or QualityConfig()
        self.renderer = renderer or TemplateRenderer()

    def enhance(
        self, result: GenerationResult, framework: str, features: Iterable[str]
    ) -> GenerationResult:
        """Return a new result extended with quality tooling.

        The input result is not modified.  When ``package.json`` is absent
        the manifest merge is skipped and only standalone files are added.
        """
        strict = self.config.strict_feature in set(features)

        if framework == FLUTTER:
            additions = self._flutter_files(result, strict)
        else:
            additions = self._javascript_files(result, framework, strict)

        files = upsert_files(result.files, additions)
        manifest = result.manifest

        package = next((f for f in files if f.path == "package.json"), None)
        if package is not None:
            manifest = merge_manifest(
                json.loads(package.content),
                {
                    "scripts": quality_scripts(self.config, framework, strict),
                    "devDependencies": quality_dev_dependencies(self.config, framework),
                },
            )
            files = upsert_files(
                files, [GeneratedFile(path="package.json", content=json_content(manifest))]
            )

        return result.model_copy(update={"files": files, "manifest": manifest})

    # -- JavaScript / TypeScript -------------------------------------------

    def _javascript_files(
        self, result: GenerationResult, framework: str, strict: bool
    ) -> list[GeneratedFile]:
        additions: list[GeneratedFile] = []
        if self.config.enable_lint:
            additions.append(self.eslint_config(framework, strict))
        if self.config.enable_format:
            additions.extend(self.prettier_files(framework))
        if strict:
            additions.append(self.strict_tsconfig(result, framework))
        if self.config.enable_testing:
            additions.extend(self.testing_files(framework))
        return additions

    def eslint_config(self, framework: str, strict: bool) -> GeneratedFile:
        """``.eslintrc.json``: base rules with a framework plugin layer."""
        extends = ["eslint:recommended", "plugin:@typescript-eslint/recommended"]
        if strict:
            extends.append("plugin:@typescript-eslint/strict")
        plugins = ["@typescript-eslint"]
        rules = dict(BASE_LINT_RULES)
        env = {"browser": True, "es2021": True, "node": True}
        config: dict[str, Any] = {
            "root": True,
            "env": env,
            "parser": "@typescript-eslint/parser",
            "parserOptions": {"ecmaVersion": 2021, "sourceType": "module"},
        }
        ignore = ["node_modules", "dist", "build", "coverage"]

        if framework == "react":
            extends += ["plugin:react/recommended", "plugin:react-hooks/recommended"]
            plugins += ["react", "react-hooks"]
            config["parserOptions"]["ecmaFeatures"] = {"jsx": True}
            config["settings"] = {"react": {"version": "detect"}}
            rules.update(
                {
                    "react/prop-types": "off",
                    "react/react-in-jsx-scope": "off",
                    "react-hooks/rules-of-hooks": "error",
                    "react-hooks/exhaustive-deps": "warn",
                }
            )
        elif framework == "nextjs":
            extends.append("next/core-web-vitals")
            ignore.append(".next")
        elif framework == "svelte":
            extends.append("plugin:svelte/recommended")
            config["parserOptions"]["extraFileExtensions"] = [".svelte"]
            config["overrides"] = [
                {
                    "files": ["*.svelte"],
                    "parser": "svelte-eslint-parser",
                    "parserOptions": {"parser": "@typescript-eslint/parser"},
                }
            ]
        elif framework == "react-native":
            extends.append("@react-native")
            env["browser"] = False
            ignore += ["android", "ios"]
        elif framework == "electron":
            ignore.append("release")
        elif framework == "tauri":
            ignore.append("src-tauri")

        if self.config.enable_format:
            extends.append("prettier")

        config["extends"] = extends
        config["plugins"] = plugins
        config["rules"] = rules
        config["ignorePatterns"] = ignore
        return GeneratedFile(path=".eslintrc.json", content=json_content(config))

    def prettier_files(self, framework: str) -> list[GeneratedFile]:
        """``.prettierrc.json`` and ``.prettierignore``."""
        settings = dict(PRETTIER_CONFIG)
        if framework == "svelte":
            settings["plugins"] = ["prettier-plugin-svelte"]
            settings["overrides"] = [{"files": "*.svelte", "options": {"parser": "svelte"}}]
        return [
            GeneratedFile(path=".prettierrc.json", content=json_content(settings)),
            GeneratedFile(
                path=".prettierignore",
                content=self.renderer.render("quality/prettierignore.j2", {"framework": framework}),
            ),
        ]

    def strict_tsconfig(self, result: GenerationResult, framework: str) -> GeneratedFile:
        """Strict ``tsconfig.json`` layered over the generator's own.

        Every strict flag is enabled and ``@/*`` aliases the framework's
        source root.
        """
        existing = result.get_file("tsconfig.json")
        tsconfig: dict[str, Any] = json.loads(existing.content) if existing else {}
        options = dict(tsconfig.get("compilerOptions") or {})
        options.update(STRICT_COMPILER_OPTIONS)

        root = SOURCE_ROOTS.get(framework, "src")
        options["baseUrl"] = "."
        options["paths"] = {"@/*": ["./*" if root == "." else f"./{root}/*"]}

        tsconfig["compilerOptions"] = options
        if "include" not in tsconfig and "extends" not in tsconfig:
            tsconfig["include"] = [root]
        return GeneratedFile(path="tsconfig.json", content=json_content(tsconfig))

    def testing_files(self, framework: str) -> list[GeneratedFile]:
        """Test runner config, a setup file and one smoke test."""
        render = self.renderer.render

        if runner_for(framework) == "jest":
            return [
                GeneratedFile(path="jest.config.js", content=render("quality/jest.config.js.j2", {})),
                GeneratedFile(path="jest.setup.js", content=render("quality/jest.setup.js.j2", {})),
                GeneratedFile(
                    path="__tests__/App.test.tsx",
                    content=render("quality/react-native.test.tsx.j2", {}),
                ),
            ]

        if framework == "react":
            ctx = {
                "framework": framework,
                "setup_path": "./src/test/setup.ts",
                "test_glob": "src/**/*.test.{ts,tsx}",
                "testing_library": "@testing-library/react",
                "component": "App",
                "entry_import": "./App",
            }
            setup_path, test_path = "src/test/setup.ts", "src/App.test.tsx"
            setup = render("quality/setup-dom.ts.j2", ctx)
            smoke = render("quality/react.test.tsx.j2", ctx)
        elif framework == "nextjs":
            ctx = {
                "framework": framework,
                "setup_path": "./test/setup.ts",
                "test_glob": "test/**/*.test.{ts,tsx}",
                "testing_library": "@testing-library/react",
                "component": "Home",
                "entry_import": "../app/page",
            }
            setup_path, test_path = "test/setup.ts", "test/page.test.tsx"
            setup = render("quality/setup-dom.ts.j2", ctx)
            smoke = render("quality/react.test.tsx.j2", ctx)
        elif framework == "svelte":
            ctx = {
                "framework": framework,
                "setup_path": "./src/test/setup.ts",
                "test_glob": "src/**/*.test.ts",
                "testing_library": "@testing-library/svelte",
            }
            setup_path, test_path = "src/test/setup.ts", "src/test/App.test.ts"
            setup = render("quality/setup-dom.ts.j2", ctx)
            smoke = render("quality/svelte.test.ts.j2", ctx)
        else:
            is_electron = framework == "electron"
            ctx = {
                "framework": framework,
                "setup_path": "./test/setup.ts",
                "test_glob": "test/**/*.test.ts",
                "entry_label": "renderer" if is_electron else "main",
                "entry_import": "../src/renderer" if is_electron else "../src/main",
                "ready_target": "document" if is_electron else "window",
            }
            setup_path = "test/setup.ts"
            test_path = "test/renderer.test.ts" if is_electron else "test/main.test.ts"
            setup = render("quality/setup-plain.ts.j2", ctx)
            smoke = render("quality/dom.test.ts.j2", ctx)

        return [
            GeneratedFile(path="vitest.config.ts", content=render("quality/vitest.config.ts.j2", ctx)),
            GeneratedFile(path=setup_path, content=setup),
            GeneratedFile(path=test_path, content=smoke),
        ]

    # -- Flutter -----------------------------------------------------------

    def _flutter_files(self, result: GenerationResult, strict: bool) -> list[GeneratedFile]:
        additions: list[GeneratedFile] = []
        if self.config.enable_lint or strict:
            additions.append(self.analysis_options(strict))
        if self.config.enable_testing:
            package_name = _pubspec_name(result)
            additions.extend(
                [
                    GeneratedFile(
                        path="dart_test.yaml",
                        content=yaml.safe_dump(
                            {"tags": {"smoke": {"timeout": "30s"}}}, sort_keys=False
                        ),
                    ),
                    GeneratedFile(
                        path="test/flutter_test_config.dart",
                        content=self.renderer.render("quality/flutter_test_config.dart.j2", {}),
                    ),
                    GeneratedFile(
                        path="test/widget_test.dart",
                        content=self.renderer.render(
                            "quality/widget_test.dart.j2", {"package_name": package_name}
                        ),
                    ),
                ]
            )
        return additions

    def analysis_options(self, strict: bool) -> GeneratedFile:
        """``analysis_options.yaml`` for the Dart analyzer."""
        options: dict[str, Any] = {}
        analyzer: dict[str, Any] = {"exclude": ["build/**", "lib/**.g.dart"]}
        if self.config.enable_lint:
            options["include"] = "package:flutter_lints/flutter.yaml"
        if strict:
            analyzer["language"] = {
                "strict-casts": True,
                "strict-inference": True,
                "strict-raw-types": True,
            }
            analyzer["errors"] = {"missing_return": "error", "dead_code": "warning"}
        options["analyzer"] = analyzer
        if self.config.enable_lint:
            options["linter"] = {
                "rules": {
                    "avoid_print": True,
                    "prefer_const_constructors": True,
                    "prefer_final_locals": True,
                    "prefer_single_quotes": True,
                    "always_declare_return_types": True,
                }
            }
        if self.config.enable_format:
            options["formatter"] = {"page_width": 100}
        return GeneratedFile(
            path="analysis_options.yaml", content=yaml.safe_dump(options, sort_keys=False)
        )


def _pubspec_name(result: GenerationResult) -> str:
    pubspec = result.get_file("pubspec.yaml")
    if pubspec is not None:
        data = yaml.safe_load(pubspec.content) or {}
        if isinstance(data, dict) and data.get("name"):
            return str(data["name"])
    return str(result.manifest.get("name") or "app")
