"""
Prompt Builder - Shapes the text sent to the model for each task kind

The wording here is a contract with services.artifact_extractor: fix prompts
ask for exactly one fenced block, generation prompts ask for the file path on
its own line directly above each fenced block. Change both together.
"""

from __future__ import annotations

DEFAULT_LANGUAGE = "plaintext"

SYSTEM_PROMPT = "You are a helpful AI assistant for analyzing and generating code."

FILE_LAYOUT_RULE = (
    "For each file, print its relative path (for example src/app/main.py) on its own line, "
    "immediately followed by a line opening a code block with triple backticks, then the full "
    "file content, then a line closing the code block. Do not put anything between the path "
    "line and the opening backticks."
)

ANALYSIS_SECTIONS = (
    ("Summary", "Brief overview of the code and its quality"),
    ("Critical Issues", "List any bugs, errors, or critical problems"),
    ("Performance Concerns", "Identify performance bottlenecks or inefficient code"),
    ("Readability & Maintainability", "Suggestions to improve code structure and readability"),
    ("Security Considerations", "Highlight any security vulnerabilities or risks"),
    ("Improvement Recommendations", "Specific actionable suggestions for improvement"),
)


def _language(language: str | None) -> str:
    return (language or "").strip() or DEFAULT_LANGUAGE


def _fenced(code: str | None) -> list[str]:
    return ["```", code or "", "```"]


def build_chat_system_prompt() -> str:
    """System turn for conversational sessions"""
    return "\n".join(
        [
            SYSTEM_PROMPT,
            "When the user asks you to create, generate, build, make, write or develop code, "
            "answer with complete files.",
            FILE_LAYOUT_RULE,
        ]
    )


def build_analysis_prompt(code: str, language: str | None) -> str:
    """Prompt asking for a sectioned review of one document"""
    lines = [
        "You are an expert code reviewer specialized in identifying issues, bugs, and optimization "
        "opportunities. Analyze the following code and provide detailed feedback.",
        "",
        f"Programming Language: {_language(language)}",
        "",
        "Code to analyze:",
        *_fenced(code),
        "",
        "Provide your analysis in this structured format:",
    ]
    for heading, hint in ANALYSIS_SECTIONS:
        lines.append(f"## {heading}")
        lines.append(f"[{hint}]")
    return "\n".join(lines) + "\n"


def build_fix_prompt(code: str, issues: str | None, language: str | None) -> str:
    """Prompt asking for the complete fixed document in one fenced block"""
    lines = [
        "You are an expert programmer tasked with improving and fixing the following code based on "
        "identified issues. Provide the complete fixed code.",
        "",
        f"Programming Language: {_language(language)}",
        "",
        "Original code:",
        *_fenced(code),
        "",
        "Issues to address:",
        issues or "",
        "",
        "Please provide:",
        "1. A summary of changes you're making to address the issues",
        "2. The complete fixed code (not just the changes)",
        "3. Comment your fixes within the code to explain important changes",
        "",
        "Wrap the full fixed code in exactly one code block marked with triple backticks. "
        "Do not use triple backticks anywhere else in your answer.",
    ]
    return "\n".join(lines) + "\n"


def build_generation_prompt(description: str, language: str | None) -> str:
    """Prompt asking for one or more files, each announced by its path"""
    lines = [
        "You are an expert developer tasked with generating high-quality, production-ready code "
        "based on the following requirements.",
        "",
        f"Programming Language: {_language(language)}",
        "",
        "Requirements:",
        description or "",
        "",
        "Please generate complete, well-structured code with the following characteristics:",
        "- Include proper error handling",
        "- Add comprehensive comments explaining complex sections",
        "- Follow best practices and design patterns for this language",
        "- Optimize for readability and maintainability",
        "- Include necessary imports/dependencies",
        "",
        FILE_LAYOUT_RULE,
    ]
    return "\n".join(lines) + "\n"


def build_file_structure_prompt(description: str) -> str:
    """Prompt asking for a directory layout and architecture notes"""
    lines = [
        "You are a software architecture expert tasked with designing a file structure for a "
        "program based on the following requirements.",
        "",
        "Program Requirements:",
        description or "",
        "",
        "Please provide a directory structure showing all necessary files with the following format:",
        "```",
        "project_root/",
        "  ├── file1.ext         # Description of file1's purpose",
        "  ├── directory/",
        "  │   ├── file2.ext     # Description of file2's purpose",
        "  │   └── file3.ext     # Description of file3's purpose",
        "  └── file4.ext         # Description of file4's purpose",
        "```",
        "",
        "After the directory structure, provide a brief explanation of the overall architecture, including:",
        "1. How components interact with each other",
        "2. Key architectural patterns used",
        "3. Data flow through the system",
        "4. Any external dependencies required",
    ]
    return "\n".join(lines) + "\n"
