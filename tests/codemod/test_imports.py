import pytest

from tracewrap.codemod.imports import Binding, ensure_callee_import, find_callee_binding, module_style, prologue_end
from tracewrap.codemod.nodes import TransformOptions
from tracewrap.exceptions import ImportConflictError
from tracewrap.syntax.provider import Span, parse


@pytest.mark.parametrize(
    "source,expected",
    [
        ("import { trace } from 'autotel';\n", Binding("autotel", named=True)),
        ('import { init, trace } from "autotel";\n', Binding("autotel", named=True)),
        ("import { span as trace } from 'autotel';\n", Binding("autotel", named=True)),
        ("import { trace as t } from 'autotel';\n", None),
        ("import trace from 'autotel';\n", Binding("autotel", named=False)),
        ("import * as trace from 'autotel';\n", Binding("autotel", named=False)),
        ("import { trace } from './tracing';\n", Binding("./tracing", named=True)),
        ("const { trace } = require('autotel');\n", Binding("autotel", named=True)),
        ("const { span: trace } = require('autotel');\n", Binding("autotel", named=True)),
        ("const trace = require('autotel');\n", Binding("autotel", named=False)),
        ("const trace = () => 1;\n", Binding(None, named=False)),
        ("import 'autotel';\n", None),
        ("import type { trace } from 'autotel';\n", None),
        ("import { type trace, init } from 'autotel';\n", None),
        ("function trace() {}\n", Binding(None, named=False)),
        ("export class trace {}\n", Binding(None, named=False)),
        ("let { trace } = helpers;\n", Binding(None, named=True)),
        ("function other(trace) {}\n", None),
    ],
)
def test_find_callee_binding(source, expected):
    assert find_callee_binding(parse(source, "/fake/a.ts"), "trace") == expected


@pytest.mark.parametrize(
    "source,file_path,requested,expected",
    [
        ("const a = 1;\n", "/fake/a.ts", "auto", "esm"),
        ("const a = 1;\n", "/fake/a.cjs", "auto", "cjs"),
        ("const x = require('x');\n", "/fake/a.js", "auto", "cjs"),
        ("module.exports = {};\n", "/fake/a.js", "auto", "cjs"),
        ("import x from 'x';\nconst y = require('y');\n", "/fake/a.js", "auto", "esm"),
        ("export const a = 1;\n", "/fake/a.ts", "cjs", "cjs"),
    ],
)
def test_module_style(source, file_path, requested, expected):
    assert module_style(parse(source, file_path), requested) == expected


def test_prologue_end():
    source = "#!/usr/bin/env node\n// comment\n'use strict';\n\"use client\";\nconst a = 1;\n"
    tree = parse(source, "/fake/a.js")
    offset = prologue_end(tree)
    assert source[:offset] == "#!/usr/bin/env node\n// comment\n'use strict';\n\"use client\";"


def test_prologue_end_without_directives():
    assert prologue_end(parse("// just a comment\nconst a = 1;\n", "/fake/a.ts")) == 0


def test_ensure_callee_import_inserts_at_top():
    edit = ensure_callee_import(parse("const a = 1;\n", "/fake/a.ts"), TransformOptions())
    assert edit is not None
    assert edit.span == Span(0, 0)
    assert edit.text == "import { trace } from 'autotel';\n"


def test_ensure_callee_import_after_directive():
    source = "'use strict';\nconst a = 1;\n"
    edit = ensure_callee_import(parse(source, "/fake/a.js"), TransformOptions())
    assert edit.span == Span(13, 13)
    assert edit.text == "\nimport { trace } from 'autotel';"


def test_ensure_callee_import_noop_when_bound():
    tree = parse("import { trace } from 'autotel';\n", "/fake/a.ts")
    assert ensure_callee_import(tree, TransformOptions()) is None


@pytest.mark.parametrize(
    "source",
    [
        "import { trace } from '@opentelemetry/api';\n",
        "import trace from 'autotel';\n",
        "const trace = require('autotel');\n",
        "export function trace() {}\n",
    ],
)
def test_ensure_callee_import_conflicts(source):
    with pytest.raises(ImportConflictError):
        ensure_callee_import(parse(source, "/fake/a.ts"), TransformOptions())


def test_import_source_is_quoted():
    options = TransformOptions(callee="traced", import_source="it's")
    edit = ensure_callee_import(parse("const a = 1;\n", "/fake/a.js"), options)
    assert edit.text == "import { traced } from 'it\\'s';\n"
