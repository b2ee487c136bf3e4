"""JSON serialization/deserialization for Troll expression trees.

This module converts between the AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Tokens keep their
position so that runtime errors from a reloaded tree still point into the
script they came from. `script_to_obj` / `script_from_obj` wrap a whole parsed
script, function table included.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Accumulate,
    Binary,
    BinarySchema,
    Binding,
    CollectionLiteral,
    EndStyle,
    Foreach,
    FunctionCall,
    Group,
    If,
    Literal,
    Repeat,
    TupleLiteral,
    Unary,
    UnarySchema,
    Variable,
)
from .function import FunctionDefinition
from .parser import ParsedScript
from .tokens import Token, TokenType
from .values import Collection, Pair, Real, Text, Value


def token_to_obj(t: Token) -> Dict[str, Any]:
    return {"token_type": t.type.name, "lexeme": t.lexeme, "literal": t.literal, "line": t.line, "column": t.column}


def token_from_obj(o: Dict[str, Any]) -> Token:
    return Token(TokenType[o["token_type"]], o["lexeme"], o.get("literal"), o.get("line", 0), o.get("column", 0))


def value_to_obj(v: Value) -> Dict[str, Any]:
    if isinstance(v, Collection):
        return {"__value__": "Collection", "values": list(v.values)}
    if isinstance(v, Real):
        return {"__value__": "Real", "value": v.value}
    if isinstance(v, Text):
        return {"__value__": "Text", "value": v.value}
    if isinstance(v, Pair):
        return {"__value__": "Pair", "first": value_to_obj(v.first), "second": value_to_obj(v.second)}
    raise TypeError(f"Unsupported value for serialization: {type(v).__name__}")


def value_from_obj(o: Dict[str, Any]) -> Value:
    kind = o.get("__value__")
    if kind == "Collection":
        return Collection(o["values"])
    if kind == "Real":
        return Real(float(o["value"]))
    if kind == "Text":
        return Text(o["value"])
    if kind == "Pair":
        return Pair(value_from_obj(o["first"]), value_from_obj(o["second"]))
    raise ValueError(f"Unknown value kind: {kind}")


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Literal):
        return {"type": "Literal", "value": value_to_obj(node.value)}
    if isinstance(node, Variable):
        return {"type": "Variable", "identifier": node.identifier, "default": ast_to_obj(node.default)}
    if isinstance(node, Binary):
        return {
            "type": "Binary",
            "left": ast_to_obj(node.left),
            "op": token_to_obj(node.op),
            "schema": node.schema.value,
            "right": ast_to_obj(node.right),
        }
    if isinstance(node, Unary):
        return {"type": "Unary", "op": token_to_obj(node.op), "schema": node.schema.value, "right": ast_to_obj(node.right)}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_branch": ast_to_obj(node.then_branch),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, Foreach):
        return {"type": "Foreach", "identifier": node.identifier, "source": ast_to_obj(node.source), "body": ast_to_obj(node.body)}
    if isinstance(node, (Repeat, Accumulate)):
        return {
            "type": type(node).__name__,
            "identifier": node.identifier,
            "expr": ast_to_obj(node.expr),
            "end_style": node.end_style.value,
            "test": ast_to_obj(node.test),
        }
    if isinstance(node, Binding):
        return {
            "type": "Binding",
            "identifier": node.identifier,
            "definition": ast_to_obj(node.definition),
            "use": ast_to_obj(node.use),
        }
    if isinstance(node, FunctionCall):
        return {"type": "FunctionCall", "identifier": node.identifier, "arguments": [ast_to_obj(a) for a in node.arguments]}
    if isinstance(node, CollectionLiteral):
        return {"type": "CollectionLiteral", "elements": [ast_to_obj(e) for e in node.elements]}
    if isinstance(node, TupleLiteral):
        return {"type": "TupleLiteral", "first": ast_to_obj(node.first), "second": ast_to_obj(node.second)}
    if isinstance(node, Group):
        return {"type": "Group", "expr": ast_to_obj(node.expr)}
    if isinstance(node, FunctionDefinition):
        return {
            "type": "FunctionDefinition",
            "identifier": node.identifier,
            "parameters": list(node.parameters),
            "body": ast_to_obj(node.body),
        }

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    t = obj.get("type")
    if t == "Literal":
        return Literal(value_from_obj(obj["value"]))
    if t == "Variable":
        return Variable(obj["identifier"], ast_from_obj(obj.get("default")))
    if t == "Binary":
        return Binary(
            left=ast_from_obj(obj["left"]),
            op=token_from_obj(obj["op"]),
            schema=BinarySchema(obj["schema"]),
            right=ast_from_obj(obj["right"]),
        )
    if t == "Unary":
        return Unary(op=token_from_obj(obj["op"]), schema=UnarySchema(obj["schema"]), right=ast_from_obj(obj["right"]))
    if t == "If":
        return If(
            condition=ast_from_obj(obj["condition"]),
            then_branch=ast_from_obj(obj["then_branch"]),
            else_branch=ast_from_obj(obj["else_branch"]),
        )
    if t == "Foreach":
        return Foreach(identifier=obj["identifier"], source=ast_from_obj(obj["source"]), body=ast_from_obj(obj["body"]))
    if t in ("Repeat", "Accumulate"):
        node_type = Repeat if t == "Repeat" else Accumulate
        return node_type(
            identifier=obj["identifier"],
            expr=ast_from_obj(obj["expr"]),
            end_style=EndStyle(obj["end_style"]),
            test=ast_from_obj(obj["test"]),
        )
    if t == "Binding":
        return Binding(
            identifier=obj["identifier"],
            definition=ast_from_obj(obj["definition"]),
            use=ast_from_obj(obj["use"]),
        )
    if t == "FunctionCall":
        return FunctionCall(identifier=obj["identifier"], arguments=tuple(ast_from_obj(a) for a in obj["arguments"]))
    if t == "CollectionLiteral":
        return CollectionLiteral(elements=tuple(ast_from_obj(e) for e in obj["elements"]))
    if t == "TupleLiteral":
        return TupleLiteral(first=ast_from_obj(obj["first"]), second=ast_from_obj(obj["second"]))
    if t == "Group":
        return Group(expr=ast_from_obj(obj["expr"]))
    if t == "FunctionDefinition":
        return FunctionDefinition(
            identifier=obj["identifier"],
            parameters=tuple(obj["parameters"]),
            body=ast_from_obj(obj["body"]),
        )

    raise ValueError(f"Unknown AST node type: {t}")


def script_to_obj(script: ParsedScript) -> Dict[str, Any]:
    return {
        "type": "Script",
        "expression": ast_to_obj(script.expression),
        "functions": [ast_to_obj(f) for f in script.functions.values()],
    }


def script_from_obj(obj: Dict[str, Any]) -> ParsedScript:
    if obj.get("type") != "Script":
        raise ValueError(f"Unknown AST node type: {obj.get('type')}")
    functions = [ast_from_obj(f) for f in obj.get("functions", [])]
    return ParsedScript(ast_from_obj(obj["expression"]), {f.identifier: f for f in functions})
