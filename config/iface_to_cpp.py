#!/usr/bin/env python3
#
# Copyright (c) 2025      Jeffrey M. Squyres.  All rights reserved.
#
# $COPYRIGHT$
#
# Additional copyrights may follow
#
# $HEADER$
#

# Use only standard library modules (no third-party modules) so that
# we can avoid needing to PIP-install anything.

import argparse
import os
import string
import sys

GENERATOR = "iface_to_cpp.py"

# Scintilla.iface always uses CRLF, regardless of the platform
IFACE_NEWLINE = "\r\n"

FEATURES = ("fun", "get", "set")

# Everything from this line onwards is ignored
DEPRECATED_MARKER = "cat Deprecated"

TYPES = {
    "bool": "bool",
    "cells": "const char*",
    "colour": "Colour",
    "findtext": "void*",
    "formatrange": "void*",
    "line": "Line",
    "pointer": "void*",
    "position": "Position",
    "string": "const char*",
    "stringresult": "char*",
    "textrange": "void*",
    "void": "void",
}

DEFAULT_TYPE = "int"
POINTER_TYPE = "void*"
VOID_TYPE = "void"

INTEGER_TOKENS = ("int", "keymod", "colouralpha")

LPARAM_VALUE_TYPES = ("int", "bool", "Colour", "Line", "Position")

EOLS = {
    "native": os.linesep,
    "crlf": "\r\n",
    "lf": "\n",
}

HEADER_TEMPLATE = string.Template("""#pragma once
#include <ILexer.h>
#include <Lexilla.h>
#include <Scintilla.h>
#include <SciLexer.h>

template <class T>
class $class_name : public CWindowImpl<T, CWindow, CControlWinTraits>
{
public:
\tDECLARE_WND_SUPERCLASS2(L"$window_class", $class_name, CWindow::GetWndClassName())

\tusing Colour = int;
\tusing Line = int;
\tusing Position = int;

\tvoid SetFnPtr()
\t{
\t\tATLASSERT(::IsWindow(this->m_hWnd));
\t\tfn = reinterpret_cast<$direct_function>(::SendMessage(this->m_hWnd, SCI_GETDIRECTFUNCTION, 0, 0));
\t\tptr = ::SendMessage(this->m_hWnd, SCI_GETDIRECTPOINTER, 0, 0);
\t}""")

PROVENANCE_TEMPLATE = string.Template(
    "\n\n\t// Auto-generated from $source by $generator")

DIRECT_FUNCTION_TEMPLATE = string.Template(
    "\tusing $direct_function = intptr_t(*)(intptr_t ptr, uint32_t msg, "
    "uintptr_t wParam, intptr_t lParam);\n\n")

FOOTER_TEMPLATE = string.Template("""
private:
$direct_function_decl\tintptr_t Call(uint32_t msg, uintptr_t wParam = 0, intptr_t lParam = 0)
\t{
\t\treturn fn(ptr, msg, wParam, lParam);
\t}

\t$direct_function fn;
\tintptr_t ptr;
};
""")

VARIANTS = {
    # include/ScintillaImpl.h, shipped next to Scintilla.iface
    "impl": {
        "class_name": "CScintillaImpl",
        "window_class": "CScintillaImpl",
        "direct_function": "SciFnDirect",
        "declare_direct_function": False,
        "provenance": False,
    },
    # src/ui/ScintillaImpl.h
    "ui": {
        "class_name": "CScintillaImpl",
        "window_class": "WTL_ScintillaCtrl",
        "direct_function": "FunctionDirect",
        "declare_direct_function": True,
        "provenance": True,
    },
}


class UnknownTypeError(ValueError):
    """Raised when an lParam has a type that cannot be passed as intptr_t."""

    def __init__(self, type_name: str, param_name: str):
        self.type_name = type_name
        self.param_name = param_name
        super().__init__("Parsing aborted because of unknown type: "
                         f"{type_name} {param_name}")


def split_lines(content: str) -> list:
    # Tolerate files whose line endings were converted on checkout
    return content.replace(IFACE_NEWLINE, "\n").split("\n")

def declaration_tokens(line: str) -> list:
    # Only the part before the message number matters:
    # "fun void SetText=2181(, string text)" -> ["fun", "void", "SetText"]
    eq = line.find("=")
    if eq == -1:
        return []
    return line[:eq].split()

def collect_enumerations(lines) -> set:
    enumerations = set()
    for line in lines:
        if line.startswith(DEPRECATED_MARKER):
            break
        tokens = declaration_tokens(line)
        if len(tokens) >= 2 and tokens[0] == "enu":
            enumerations.add(tokens[1])
    return enumerations

def parse_params(line: str) -> list:
    """Return the (type, name) pairs of the wParam and lParam slots.

    A slot that is not declared comes back as ('', '').
    """
    params = []
    start = line.find("(")
    end = line.find(")")
    if start != -1 and end > start:
        for item in line[start + 1:end].split(","):
            tokens = item.split()
            ptype = tokens[0] if tokens else ""
            pname = tokens[1] if len(tokens) > 1 else ""
            params.append((ptype, pname))

    return (params + [("", "")] * 2)[:2]

def resolve_type(token: str) -> str:
    if not token:
        return ""
    return TYPES.get(token, DEFAULT_TYPE)

def resolve_lparam_type(token: str, enumerations=()) -> str:
    # Unlike wParam, unrecognized lParam tokens are not assumed to be
    # integers; they are handed back as-is so that format_lparam()
    # rejects them.
    if not token or token in TYPES:
        return resolve_type(token)
    if token in INTEGER_TOKENS or token in enumerations:
        return DEFAULT_TYPE
    return token

def format_wparam(ptype: str, name: str) -> str:
    if not name:
        return "0"
    if ptype.endswith("*"):
        return f"reinterpret_cast<uintptr_t>({name})"
    return name

def format_lparam(ptype: str, name: str) -> str:
    if not name:
        return "0"
    if ptype.endswith("*"):
        return f"reinterpret_cast<intptr_t>({name})"
    if ptype in LPARAM_VALUE_TYPES:
        return name
    raise UnknownTypeError(ptype, name)

def create_stub(ret: str, name: str, params) -> str:
    # "params" holds already-resolved types
    (type_wp, name_wp), (type_lp, name_lp) = params

    signature = ", ".join(f"{ptype} {pname}"
                          for ptype, pname in params if ptype)

    args = [f"SCI_{name.upper()}"]
    if type_wp or type_lp:
        args.append(format_wparam(type_wp, name_wp))
        if type_lp:
            args.append(format_lparam(type_lp, name_lp))

    call = f"Call({', '.join(args)})"
    if ret == POINTER_TYPE:
        call = f"reinterpret_cast<void*>({call})"
    if ret != VOID_TYPE:
        call = f"return {call}"

    return f"\t{ret} {name}({signature}) {{ {call}; }}"

def generate_stubs(content: str) -> list:
    lines = split_lines(content)
    enumerations = collect_enumerations(lines)
    stubs = []

    for line in lines:
        if line.startswith(DEPRECATED_MARKER):
            break

        tokens = declaration_tokens(line)
        if len(tokens) < 3 or tokens[0] not in FEATURES:
            continue

        ret = resolve_type(tokens[1])
        name = tokens[2]

        (token_wp, name_wp), (token_lp, name_lp) = parse_params(line)
        params = [
            (resolve_type(token_wp), name_wp),
            (resolve_lparam_type(token_lp, enumerations), name_lp),
        ]
        stubs.append(create_stub(ret, name, params))

    return sorted(stubs)

def generate_header(content: str, settings=None, eol: str = os.linesep) -> str:
    """Turn the contents of Scintilla.iface into the wrapper header.

    "settings" is one of the VARIANTS dicts, optionally extended with
    "source" (the input file name quoted in the provenance comment).
    Raises UnknownTypeError before anything is rendered if a
    declaration cannot be wrapped.
    """
    if settings is None:
        settings = VARIANTS["impl"]

    # Build the stubs first: no output at all on failure
    stubs = generate_stubs(content)

    values = {
        "class_name": settings["class_name"],
        "window_class": settings["window_class"],
        "direct_function": settings["direct_function"],
        "source": settings.get("source", "Scintilla.iface"),
        "generator": GENERATOR,
        "direct_function_decl": "",
    }
    if settings.get("declare_direct_function"):
        values["direct_function_decl"] = \
            DIRECT_FUNCTION_TEMPLATE.substitute(values)

    header = HEADER_TEMPLATE.substitute(values)
    if settings.get("provenance"):
        header += PROVENANCE_TEMPLATE.substitute(values)
    else:
        # Blank line between SetFnPtr() and the first stub
        header += "\n"
    footer = FOOTER_TEMPLATE.substitute(values)

    out = header.split("\n") + stubs + footer.split("\n")
    return eol.join(out)

def read_iface_file(file_path: str) -> str:
    # newline='' keeps the CRLFs intact
    with open(file_path, 'r', encoding='utf-8', newline='') as file:
        return file.read()

def write_header_file(file_path: str, text: str):
    with open(file_path, 'w', encoding='utf-8', newline='') as file:
        file.write(text)

def main():
    parser = argparse.ArgumentParser(description="Generate a C++ Scintilla wrapper class from Scintilla.iface.")
    parser.add_argument("--in",
                        dest='input_file',
                        required=True,
                        help="Path to Scintilla.iface.")
    parser.add_argument("--out",
                        required=True,
                        help="Path of the header file to generate.")
    parser.add_argument("--variant",
                        choices=sorted(VARIANTS),
                        default="impl",
                        help="Header flavor to generate (default: impl).")
    parser.add_argument("--class-name",
                        help="Name of the generated wrapper class.")
    parser.add_argument("--window-class",
                        help="Window class name registered by the wrapper.")
    parser.add_argument("--provenance",
                        action='store_true',
                        help="Add an 'Auto-generated from' comment to the header.")
    parser.add_argument("--no-provenance",
                        dest='provenance',
                        action='store_false',
                        help="Leave the 'Auto-generated from' comment out.")
    parser.set_defaults(provenance=None)
    parser.add_argument("--eol",
                        choices=sorted(EOLS),
                        default="native",
                        help="Line endings of the generated header (default: native).")
    parser.add_argument("--verbose",
                        action='store_true',
                        help="Show output or not")

    args = parser.parse_args()

    settings = dict(VARIANTS[args.variant])
    settings["source"] = os.path.basename(args.input_file)
    if args.class_name:
        settings["class_name"] = args.class_name
    if args.window_class:
        settings["window_class"] = args.window_class
    if args.provenance is not None:
        settings["provenance"] = args.provenance

    try:
        content = read_iface_file(args.input_file)
        text = generate_header(content, settings, EOLS[args.eol])
        write_header_file(args.out, text)
    except (OSError, UnicodeDecodeError, UnknownTypeError) as e:
        sys.exit(f"{parser.prog}: {e}")

    if args.verbose:
        print(f"Generated {args.out}.")

if __name__ == "__main__":
    main()
