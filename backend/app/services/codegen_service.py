from __future__ import annotations

import logging
from typing import Mapping

from backend.app.models.block import BlockSpec, Precedence, ScopeRole, StatementInputSpec, ValueInputSpec
from backend.app.models.program import BlockNode, GeneratedProgram, ProgramGraph
from backend.app.services.block_generators import (
    EMPTY_FRAGMENT,
    GENERATORS,
    BlockArguments,
    Fragment,
    Generator,
    parenthesize,
)
from backend.app.services.block_registry import BlockRegistry
from backend.app.services.codegen_errors import CompilationError, DanglingReference
from backend.app.services.generation_context import GenerationContext
from backend.app.services.literals import render_literal

DEFAULT_INDENT_UNIT = "  "
STATEMENT_TERMINATOR = "\n"

logger = logging.getLogger(__name__)

NodeMap = Mapping[str, BlockNode]


class CodegenService:
    """Turns a block graph into program text.

    Statement chains are walked in declared order, value inputs are resolved
    recursively with precedence-driven parenthesization, and motif definitions
    are hoisted into a macro section that precedes the program body. Every
    compile call owns a fresh :class:`GenerationContext`, so one service
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        registry: BlockRegistry,
        indent_unit: str = DEFAULT_INDENT_UNIT,
        generators: Mapping[str, Generator] | None = None,
    ) -> None:
        self._registry = registry
        self._indent_unit = indent_unit
        self._generators = dict(GENERATORS if generators is None else generators)

        missing = sorted(registry.kinds() - self._generators.keys())
        unknown = sorted(self._generators.keys() - registry.kinds())
        if missing or unknown:
            raise RuntimeError(
                f"Block generators out of sync with registry (missing: {missing}, unregistered: {unknown})"
            )

    @property
    def registry(self) -> BlockRegistry:
        return self._registry

    def compile(self, graph: ProgramGraph, root_id: str) -> str:
        return self.compile_program(graph, root_id).program

    def compile_program(self, graph: ProgramGraph, root_id: str | None = None) -> GeneratedProgram:
        context = GenerationContext()
        nodes = graph.node_map()

        try:
            if root_id is not None:
                body = self.compile_chain(root_id, nodes, context)
            else:
                body = "".join(
                    self._compile_chain_from(head, nodes, context)
                    for head in self._top_level_heads(graph, nodes, context)
                )
        except RecursionError as err:
            raise CompilationError("Program nests too deeply to compile.") from err
        except CompilationError as err:
            logger.warning("Block program compilation failed: %s", err)
            raise

        macros = context.hoisted_macros()
        for diagnostic in context.diagnostics:
            logger.debug("Degraded block output: %s", diagnostic)
        logger.info(
            "Compiled block program (%d nodes, %d macros, %d diagnostics)",
            len(nodes),
            len(macros),
            len(context.diagnostics),
        )

        return GeneratedProgram(
            program=self._assemble(macros, body),
            macros=macros,
            body=body,
            diagnostics=list(context.diagnostics),
        )

    def compile_chain(self, first_node_id: str, nodes: NodeMap, context: GenerationContext) -> str:
        first = nodes.get(first_node_id)
        if first is None:
            raise DanglingReference(first_node_id, slot="root")
        return self._compile_chain_from(first, nodes, context)

    def resolve_value(
        self,
        node: BlockNode,
        slot_name: str,
        consumer_tier: int,
        nodes: NodeMap,
        context: GenerationContext,
    ) -> Fragment:
        spec = self._registry.lookup(node.kind, node_id=node.id)
        for input_spec in spec.inputs:
            if input_spec.name == slot_name:
                return parenthesize(self._resolve_input(node, input_spec, nodes, context), consumer_tier)
        logger.debug("Block kind '%s' declares no value input '%s' (node '%s')", node.kind, slot_name, node.id)
        return EMPTY_FRAGMENT

    def _compile_chain_from(self, first: BlockNode, nodes: NodeMap, context: GenerationContext) -> str:
        chunks: list[str] = []
        node: BlockNode | None = first
        while node is not None:
            spec = self._registry.lookup(node.kind, node_id=node.id)
            context.visit_statement(node)

            if spec.is_statement:
                text = self._generate_statement(node, spec, nodes, context)
            else:
                context.degrade(f"Node '{node.id}' ({node.kind}) is a value block inside a statement chain; skipped.")
                text = ""

            if text:
                chunks.append(text + STATEMENT_TERMINATOR)

            if node.next is None:
                break
            following = nodes.get(node.next)
            if following is None:
                raise DanglingReference(node.next, node_id=node.id, kind=node.kind, slot="next")
            node = following

        return "".join(chunks)

    def _generate_statement(
        self,
        node: BlockNode,
        spec: BlockSpec,
        nodes: NodeMap,
        context: GenerationContext,
    ) -> str:
        if spec.scope == ScopeRole.MOTIF:
            if context.in_scope:
                context.degrade(
                    f"Motif node '{node.id}' is nested inside a '{context.scope_tag}' scope; "
                    "its definition is hoisted to the top level."
                )
            slot = context.reserve_macro(node.id)
            with context.scope(spec.scope.value):
                definition = self._invoke(node, spec, nodes, context)
            context.fill_macro(slot, str(definition) + STATEMENT_TERMINATOR)
            return ""

        if spec.defines_scope:
            with context.scope(spec.scope.value):
                return str(self._invoke(node, spec, nodes, context))

        return str(self._invoke(node, spec, nodes, context))

    def _generate_value(
        self,
        node: BlockNode,
        spec: BlockSpec,
        nodes: NodeMap,
        context: GenerationContext,
    ) -> Fragment:
        with context.resolving(node):
            result = self._invoke(node, spec, nodes, context)
        if isinstance(result, Fragment):
            return result
        return Fragment(result, spec.precedence if spec.precedence is not None else Precedence.ATOMIC)

    def _invoke(
        self,
        node: BlockNode,
        spec: BlockSpec,
        nodes: NodeMap,
        context: GenerationContext,
    ) -> str | Fragment:
        arguments = BlockArguments(node=node, spec=spec, context=context, indent_unit=self._indent_unit)
        for input_spec in spec.inputs:
            arguments.values[input_spec.name] = self._resolve_input(node, input_spec, nodes, context)
        for statement_spec in spec.statement_inputs:
            arguments.bodies[statement_spec.name] = self._compile_statement_input(
                node, statement_spec, nodes, context
            )
        return self._generators[spec.kind](arguments)

    def _resolve_input(
        self,
        node: BlockNode,
        input_spec: ValueInputSpec,
        nodes: NodeMap,
        context: GenerationContext,
    ) -> Fragment:
        binding = node.inputs.get(input_spec.name)
        if binding is None:
            if input_spec.default is not None:
                return Fragment(render_literal(input_spec.default), Precedence.ATOMIC)
            if input_spec.required:
                context.degrade(
                    f"Node '{node.id}' ({node.kind}) input '{input_spec.name}' is unbound; substituting empty text."
                )
            return EMPTY_FRAGMENT

        if binding.node_id is None:
            return Fragment(render_literal(binding.literal), Precedence.ATOMIC)

        child = nodes.get(binding.node_id)
        if child is None:
            raise DanglingReference(
                binding.node_id,
                node_id=node.id,
                kind=node.kind,
                slot=f"input '{input_spec.name}'",
            )

        child_spec = self._registry.lookup(child.kind, node_id=child.id)
        if not child_spec.produces_value:
            context.degrade(
                f"Node '{node.id}' ({node.kind}) input '{input_spec.name}' is bound to "
                f"statement block '{child.id}' ({child.kind}); substituting empty text."
            )
            return EMPTY_FRAGMENT

        return self._generate_value(child, child_spec, nodes, context)

    def _compile_statement_input(
        self,
        node: BlockNode,
        statement_spec: StatementInputSpec,
        nodes: NodeMap,
        context: GenerationContext,
    ) -> str:
        first_id = node.statements.get(statement_spec.name)
        if first_id is None:
            if statement_spec.required:
                context.degrade(
                    f"Node '{node.id}' ({node.kind}) statement input '{statement_spec.name}' is empty."
                )
            return ""

        first = nodes.get(first_id)
        if first is None:
            raise DanglingReference(
                first_id,
                node_id=node.id,
                kind=node.kind,
                slot=f"statement input '{statement_spec.name}'",
            )
        return self._compile_chain_from(first, nodes, context)

    def _top_level_heads(
        self,
        graph: ProgramGraph,
        nodes: NodeMap,
        context: GenerationContext,
    ) -> list[BlockNode]:
        referenced: set[str] = set()
        for node in graph.nodes:
            if node.next is not None:
                referenced.add(node.next)
            referenced.update(node.statements.values())
            referenced.update(binding.node_id for binding in node.inputs.values() if binding.node_id)

        heads: list[BlockNode] = []
        for node in graph.nodes:
            if node.id in referenced:
                continue
            spec = self._registry.lookup(node.kind, node_id=node.id)
            if not spec.is_statement:
                context.degrade(f"Detached value block '{node.id}' ({node.kind}) ignored.")
                continue
            heads.append(node)

        return sorted(heads, key=lambda item: (item.position.y, item.position.x, item.id))

    @staticmethod
    def _assemble(macros: list[str], body: str) -> str:
        macro_text = "".join(macros)
        if not macro_text:
            return body
        if not body:
            return macro_text
        return f"{macro_text}\n{body}"
