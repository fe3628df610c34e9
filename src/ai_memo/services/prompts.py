"""
Prompt Templates

Korean prompt builders for summaries, tags and autocomplete suggestions.
"""

from __future__ import annotations

from typing import Final, Literal

SummaryStyle = Literal["bullet", "numbered", "paragraph", "keywords"]
SummaryLength = Literal["short", "medium", "detailed"]

SUMMARY_PROMPT: Final[str] = """당신은 노트 내용을 분석하여 핵심을 요약하는 AI 어시스턴트입니다.

다음 노트의 내용을 3-6개의 불릿 포인트로 요약해주세요.

**요구사항:**
- 각 불릿은 한 문장으로 핵심 포인트를 표현
- 원문의 주요 아이디어를 정확하게 반영
- 한국어로 자연스럽게 작성
- 불필요한 설명이나 부연 설명 제외
- 불릿 포인트는 '-' 기호로 시작
- 3개 이상 6개 이하의 불릿으로 구성

**노트 내용:**
{content}

**요약:**"""

STYLE_INSTRUCTIONS: Final[dict[str, str]] = {
    "bullet": "불릿 포인트('-' 기호로 시작)로 작성",
    "numbered": "번호 목록(1., 2., 3. 형식)으로 작성",
    "paragraph": "자연스러운 하나의 문단으로 작성",
    "keywords": "핵심 키워드를 쉼표로 구분하여 나열",
}

LENGTH_INSTRUCTIONS: Final[dict[str, str]] = {
    "short": "2-3개 항목 또는 1-2문장으로 간결하게",
    "medium": "3-6개 항목 또는 3-4문장으로",
    "detailed": "6-10개 항목 또는 5-8문장으로 자세하게",
}

STYLED_SUMMARY_PROMPT: Final[str] = """당신은 노트 내용을 분석하여 핵심을 요약하는 AI 어시스턴트입니다.

다음 노트의 내용을 요약해주세요.

**요구사항:**
- 형식: {style_instruction}
- 분량: {length_instruction}
- 원문의 주요 아이디어를 정확하게 반영
- 한국어로 자연스럽게 작성
- 불필요한 설명이나 부연 설명 제외

**노트 내용:**
{content}

**요약:**"""

TAGS_PROMPT: Final[str] = """당신은 노트 내용을 분석하여 관련 태그를 생성하는 AI 어시스턴트입니다.

다음 노트의 내용을 분석하여 최대 {count}개의 태그를 생성해주세요.

**요구사항:**
- 노트의 주제, 카테고리, 키워드를 반영한 태그
- 한국어로 작성
- 각 태그는 1-3 단어로 간결하게
- 최소 {minimum}개, 최대 {count}개의 태그
- 쉼표로 구분하여 나열
- 태그는 소문자로 작성

**노트 내용:**
{content}

**태그 (쉼표로 구분):**"""

AUTOCOMPLETE_PROMPT: Final[str] = """당신은 사용자가 작성 중인 노트의 다음 내용을 제안하는 자동완성 AI 어시스턴트입니다.

사용자가 입력한 텍스트 뒤에 자연스럽게 이어질 내용을 최대 3개 제안해주세요.

**요구사항:**
- 각 제안은 한 줄에 하나씩 작성
- 형식: 제안텍스트 [word|phrase|sentence] (신뢰도%)
- 예시: 회의를 진행했습니다 [phrase] (85%)
- 입력 텍스트를 반복하지 말고 이어질 부분만 작성
- 한국어로 자연스럽게 작성
- 설명이나 번호는 붙이지 마세요
{context_block}
**입력 텍스트:**
{input_text}

**제안:**"""


def create_summary_prompt(content: str) -> str:
    """Prompt asking for a 3-6 bullet summary of ``content``."""
    return SUMMARY_PROMPT.format(content=content)


def create_styled_summary_prompt(
    content: str,
    style: SummaryStyle = "bullet",
    length: SummaryLength = "medium",
) -> str:
    """Prompt asking for a summary with an explicit format and length."""
    return STYLED_SUMMARY_PROMPT.format(
        style_instruction=STYLE_INSTRUCTIONS[style],
        length_instruction=LENGTH_INSTRUCTIONS[length],
        content=content,
    )


def create_tags_prompt(content: str, count: int = 6) -> str:
    """Prompt asking for up to ``count`` comma separated tags."""
    return TAGS_PROMPT.format(content=content, count=count, minimum=min(3, count))


def create_autocomplete_prompt(input_text: str, context: str = "") -> str:
    """Prompt asking for up to three continuations of ``input_text``."""
    context_block = ""
    if context and context.strip():
        context_block = f"\n**노트 컨텍스트:**\n{context.strip()}\n"
    return AUTOCOMPLETE_PROMPT.format(
        context_block=context_block,
        input_text=input_text,
    )
