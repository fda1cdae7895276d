"""
Assistant Orchestrator - Sequences prompt, model call, extraction and apply per user action

Every action runs inside ``_processing``: the processing flag is set on entry
and always cleared on exit. Presentation code observes changes through
``subscribe`` instead of reaching into this object.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Callable

from models.artifact import ApplyOutcome
from models.assistant import AssistantMode, AssistantState
from models.chat import ChatMessage, ModelReply
from services import artifact_extractor, prompt_builder
from services.conversation import ChatTransport, ConversationSession
from services.workspace import (
    DocumentAccessor,
    FileSink,
    WorkspaceApplier,
    is_binary_or_large,
    language_for_path,
)

NO_DOCUMENT = "No active document found."
NEED_ANALYSIS = "No analysis result available. Run an analysis on the active document first, then request fixes."
NEED_FIX = "No fixes available. Generate fixes before applying them."
NOTHING_EXTRACTED = "No files could be extracted from the response."

StateListener = Callable[[str, AssistantState], None]


class AssistantOrchestrator:
    """Owns assistant state and runs one action per user request"""

    def __init__(
        self,
        transport: ChatTransport,
        document: DocumentAccessor,
        files: FileSink,
        model_name: str,
        workspace: Any = None,
    ):
        self.document = document
        self.workspace = workspace  # Optional LocalWorkspace, used for workspace analysis
        self.applier = WorkspaceApplier(document, files)
        self.chat_session = ConversationSession(
            transport, model_name, system_prompt=prompt_builder.build_chat_system_prompt()
        )
        self.task_session = ConversationSession(transport, model_name, system_prompt=None)
        self.state = AssistantState(model_name=model_name)
        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._cancel_event = asyncio.Event()

        self._add_message(
            "Assistant",
            f"Hello! I'm your Local LLM Code Assistant using {model_name}. How can I help you today? "
            "You can ask me to analyze your code, suggest fixes, or help you generate new code.",
        )

    # ========== State / Notifications ==========

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it"""
        self._listeners.append(listener)

        def _unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _update(self, **changes) -> None:
        for field, value in changes.items():
            setattr(self.state, field, value)
            self._notify(field)

    def _notify(self, field: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(field, self.state)
            except Exception as e:
                print(f"[Orchestrator] State listener failed: {e}")

    def _add_message(self, sender: str, content: str) -> None:
        self.state.transcript.append(ChatMessage(sender=sender, content=content, is_user=sender == "You"))
        self._notify("transcript")

    @asynccontextmanager
    async def _processing(self, status: str):
        self._cancel_event.clear()
        self._update(is_processing=True, status_message=status)
        try:
            yield
        finally:
            self._update(is_processing=False)

    def set_mode(self, mode: AssistantMode) -> None:
        self._update(mode=AssistantMode(mode))

    def set_model_name(self, model_name: str) -> None:
        """Follow a configuration change; the conversation itself is kept"""
        self.chat_session.model_name = model_name
        self.task_session.model_name = model_name
        self._update(model_name=model_name)

    def set_workspace(self, workspace: Any) -> None:
        """Write generated files to, and analyze, a different workspace"""
        self.workspace = workspace
        self.applier.files = workspace

    # ========== Task Handles ==========

    def start(self, action: Callable[..., Any], *args, **kwargs) -> asyncio.Task:
        """Run an action in the background; the task is tracked until it finishes"""
        task = asyncio.ensure_future(action(*args, **kwargs))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def cancel(self) -> None:
        """Abort the in-flight model call, if any; the action finishes with a cancelled reply"""
        self._cancel_event.set()

    async def _one_shot(self, prompt: str) -> ModelReply:
        return await self.task_session.send_one_shot(prompt_builder.SYSTEM_PROMPT, prompt, self._cancel_event)

    # ========== Actions ==========

    async def run(self, text: str | None = None) -> str:
        """Run the action matching the current mode"""
        if self.state.mode == AssistantMode.ANALYSIS:
            return await self.analyze()
        if self.state.mode == AssistantMode.FIX:
            return await self.fix()
        return (await self.generate(text or ""))[0]

    async def analyze(self) -> str:
        async with self._processing("Analyzing code..."):
            content, language = self.document.get_content()
            if not content:
                self._update(analysis_result="", status_message="Analysis failed")
                return NO_DOCUMENT

            path = self.document.get_path()
            reply = await self._one_shot(prompt_builder.build_analysis_prompt(content, language))
            if reply.failed:
                report = f"Error analyzing document: {reply.content}"
                self._update(analysis_result="", status_message="Analysis failed")
                return report

            report = f"Analysis of {path}:\n\n{reply.content}"
            self._update(analysis_result=report, status_message="Analysis complete")
            return report

    async def analyze_workspace(self) -> str:
        """Analyze every source file the workspace lists, in one combined report"""
        async with self._processing("Analyzing workspace..."):
            if self.workspace is None:
                self._update(status_message="Analysis failed")
                return "No workspace configured."

            results: list[tuple[str, str]] = []
            for path, content in self.workspace.iter_source_files():
                if is_binary_or_large(content) or not content.strip():
                    continue
                prompt = prompt_builder.build_analysis_prompt(content, language_for_path(path))
                reply = await self._one_shot(prompt)
                results.append((path, reply.content))

            if not results:
                self._update(status_message="Analysis complete")
                return "No files found in the workspace."

            parts = [f"Analysis of {len(results)} files:", ""]
            for path, text in results:
                header = f"File: {path}"
                parts.extend([header, "-" * len(header), text, "", ""])
            report = "\n".join(parts)
            self._update(analysis_result=report, status_message="Analysis complete")
            return report

    async def fix(self, apply: bool = False) -> str:
        """Ask the model for a fixed version of the active document"""
        if not self.state.analysis_result:
            self._update(status_message=NEED_ANALYSIS)
            return NEED_ANALYSIS

        async with self._processing("Generating fixes..."):
            content, language = self.document.get_content()
            if not content:
                self._update(status_message="Fix generation failed")
                return NO_DOCUMENT

            prompt = prompt_builder.build_fix_prompt(content, self.state.analysis_result, language)
            reply = await self._one_shot(prompt)
            if reply.failed:
                self._update(fix_result=reply.content, fixed_code="", status_message="Fix generation failed")
                return reply.content

            fixed = artifact_extractor.extract_code_block(reply.content)
            self._update(fix_result=reply.content, fixed_code=fixed, status_message="Fixes generated")

        if apply:
            outcomes = await self.apply_fixes()
            return outcomes[0].message if outcomes else NEED_FIX
        return reply.content

    async def apply_fixes(self) -> list[ApplyOutcome]:
        """Overwrite the active document with the last extracted fix"""
        if not self.state.fix_result or not self.state.fixed_code:
            self._update(status_message=NEED_FIX)
            return []

        async with self._processing("Applying fixes..."):
            extraction = artifact_extractor.extract_single(self.state.fix_result)
            outcomes = self.applier.apply(AssistantMode.FIX, extraction)
            status = outcomes[0].message if outcomes else NEED_FIX
            self._update(status_message=status)
            return outcomes

    async def generate(self, description: str, language: str | None = None) -> tuple[str, list[ApplyOutcome]]:
        """Generate files from a description and write them to the workspace"""
        async with self._processing("Generating code..."):
            reply = await self._one_shot(prompt_builder.build_generation_prompt(description, language))
            if reply.failed:
                self._add_message("System", reply.content)
                self._update(status_message="Code generation failed")
                return reply.content, []

            outcomes = self._apply_generated(reply.content)
            if not outcomes:
                self._add_message("System", NOTHING_EXTRACTED)
                self._update(status_message=NOTHING_EXTRACTED)
                return NOTHING_EXTRACTED, []

            created = sum(1 for o in outcomes if o.success)
            summary = f"Created {created} of {len(outcomes)} file(s)."
            self._update(status_message=summary)
            return summary, outcomes

    async def generate_file_structure(self, description: str) -> str:
        async with self._processing("Designing file structure..."):
            reply = await self._one_shot(prompt_builder.build_file_structure_prompt(description))
            self._update(status_message="File structure failed" if reply.failed else "File structure ready")
            return reply.content

    async def send_chat_message(self, message: str) -> ModelReply | None:
        """Continue the chat; code requests also create the files the reply announces"""
        if not message or not message.strip():
            return None

        async with self._processing("Processing message..."):
            self._add_message("You", message)
            reply = await self.chat_session.append_and_send(message, cancel_event=self._cancel_event)
            if reply.failed:
                self._add_message("System", reply.content)
                self._update(status_message="Error processing message")
                return reply

            if artifact_extractor.is_code_generation_request(message):
                self._apply_generated(reply.content)

            self._add_message("Assistant", reply.content)
            self._update(status_message="Ready")
            return reply

    async def check_connection(self) -> tuple[bool, str]:
        verify = getattr(self.chat_session.transport, "verify_connection", None)
        if verify is None:
            return True, "Transport does not support connection checks"
        return await verify()

    def _apply_generated(self, text: str) -> list[ApplyOutcome]:
        extraction = artifact_extractor.extract_files(text)
        outcomes = self.applier.apply(AssistantMode.GENERATE, extraction)
        for outcome in outcomes:
            self._add_message("System", outcome.message)
        return outcomes
