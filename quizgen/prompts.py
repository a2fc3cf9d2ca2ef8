"""Prompt templates for question generation, summaries and transcript Q&A."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quizgen.models import Quantities

# Chunks shorter than this (after stripping) are treated as a bare topic
VERY_SHORT_INPUT = 50

# Transcripts and texts are cut to this many characters in video prompts
MAX_TRANSCRIPT_CHARS = 15000

QUESTION_SET_PROMPT = """\
You are an educational content creator. Based on the following content, \
generate educational quiz questions in JSON format.

File name: {file_name}
File type: {file_type}

Content:
{content}

{input_note}

Create the following types of questions:

1. {flashcards} Flashcards (question and answer pairs)
2. {mcqs} Multiple Choice Questions with 4 options each
3. {matching} Matching Questions (with at least 4 pairs to match)
4. {true_false} True/False Questions
5. {fill_in_blanks} Fill-in-the-blanks Questions

Create exactly the number of questions requested for each type. The questions \
should cover the main concepts and important information related to the topic.

Return your response in the following JSON format exactly. Do not include any \
explanations or markdown formatting, just the raw JSON:

{{
  "flashcards": [
    {{ "question": "...", "answer": "..." }}
  ],
  "mcqs": [
    {{ "question": "...", "options": ["...", "...", "...", "..."], "correctAnswer": 0 }}
  ],
  "matchingQuestions": [
    {{
      "id": 1,
      "question": "...",
      "leftItems": ["...", "...", "...", "..."],
      "rightItems": ["...", "...", "...", "..."],
      "correctMatches": [0, 1, 2, 3]
    }}
  ],
  "trueFalseQuestions": [
    {{ "id": 1, "question": "...", "isTrue": true }}
  ],
  "fillInBlanksQuestions": [
    {{
      "id": "fib-1",
      "question": "Complete the sentence:",
      "textWithBlanks": "Text with [BLANK_0] and [BLANK_1] placeholders",
      "correctAnswers": ["answer1", "answer2"],
      "completeText": "Text with answer1 and answer2 placeholders",
      "explanation": "Explanation of the correct answers",
      "difficulty": "easy"
    }}
  ]
}}
"""

SHORT_INPUT_NOTE = (
    "This is a very short input, possibly just a single word or phrase. "
    "Generate questions about this concept, using your knowledge to expand on "
    "the topic and create meaningful educational content related to it."
)

DOCUMENT_NOTE = "Create questions based on the document content."

MORE_QUESTIONS_PROMPT = """\
{instruction}

The title of the video is: "{title}"

Use only information that is explicitly mentioned in the transcript. Make sure \
the questions cover different topics than what might have been covered in \
previous questions.

Format your response as a JSON array with the following structure:
{structure}

IMPORTANT: Return only valid JSON without any additional text or formatting.

TRANSCRIPT:
{transcript}
"""

# Per-category (instruction, example JSON) for "generate more" prompts
MORE_QUESTIONS_SPECS = {
    "flashcards": (
        "Generate {quantity} new flashcards (question-answer pairs) based on the "
        "YouTube video transcript below.",
        '[{"question": "Question text", "answer": "Answer text"}]',
    ),
    "mcqs": (
        "Generate {quantity} new multiple-choice questions with 4 options each "
        "based on the YouTube video transcript below.",
        '[{"question": "Question text", "options": ["Option 1", "Option 2", '
        '"Option 3", "Option 4"], "correctAnswer": 0}]',
    ),
    "matching": (
        "Generate {quantity} new matching questions with 4 pairs each based on "
        "the YouTube video transcript below.",
        '[{"id": 1, "question": "Match the following terms with their definitions", '
        '"leftItems": ["Term 1", "Term 2", "Term 3", "Term 4"], '
        '"rightItems": ["Definition 1", "Definition 2", "Definition 3", "Definition 4"], '
        '"correctMatches": [0, 1, 2, 3]}]',
    ),
    "trueFalse": (
        "Generate {quantity} new true/false questions based on the YouTube video "
        "transcript below.",
        '[{"id": 1, "question": "Statement text", "isTrue": true, '
        '"explanation": "Explanation why true/false"}]',
    ),
    "fillInBlanks": (
        "Generate {quantity} new fill-in-the-blank questions based on the YouTube "
        "video transcript below.",
        '[{"id": "fib-1", "question": "Fill in the blanks", '
        '"textWithBlanks": "Text with [BLANK_0] and [BLANK_1]", '
        '"correctAnswers": ["answer1", "answer2"], '
        '"completeText": "Full text with answer1 and answer2"}]',
    ),
}


TRANSCRIPT_QUIZ_PROMPT = """\
You are an educational content creator. Generate comprehensive quiz questions \
based on this YouTube video transcript chunk. The video title is "{title}".

Content:
{content}

Create a diverse set of educational questions that test understanding of the \
key concepts. Include:
1. Multiple choice questions (with explanations for correct answers)
2. True/False questions (with explanations)
3. Fill-in-the-blank questions
4. Matching questions (with related concepts)
5. Flashcard-style questions

Return your response in this exact JSON format:
{{
  "mcqs": [
    {{ "question": "...", "options": ["...", "...", "...", "..."], "correctAnswer": 0, "explanation": "..." }}
  ],
  "trueFalseQuestions": [
    {{ "id": 1, "question": "...", "isTrue": true, "explanation": "..." }}
  ],
  "fillInBlanksQuestions": [
    {{
      "id": "fib-1",
      "question": "Complete this statement:",
      "textWithBlanks": "... [BLANK_0] ... [BLANK_1] ...",
      "correctAnswers": ["...", "..."],
      "completeText": "... full text ...",
      "explanation": "...",
      "difficulty": "medium"
    }}
  ],
  "matchingQuestions": [
    {{
      "id": 1,
      "question": "Match these related concepts:",
      "leftItems": ["...", "...", "...", "..."],
      "rightItems": ["...", "...", "...", "..."],
      "correctMatches": [0, 1, 2, 3]
    }}
  ],
  "flashcards": [
    {{ "question": "...", "answer": "..." }}
  ]
}}
"""

_SUMMARY_LAYOUT = """\
1. Start with a captivating title using "# " format.
2. Add a brief overview (2-3 sentences) of the main topic.
3. Create 3-4 clear subheadings using "## " format that organize the key themes.
4. Under each subheading use concise bullet points, **bold text** for \
important concepts and short paragraphs of 2-3 sentences at most.
5. End with a "## Key Takeaways" section with 3-4 bullet points.

Leave empty lines between major sections."""

VIDEO_SUMMARY_PROMPT = """\
You are an educational assistant summarizing a YouTube video.

The title of the video is: "{title}"

Below is the transcript of the video. Create a well-structured summary \
following these guidelines:

{layout}

TRANSCRIPT:
{text}
"""

TEXT_SUMMARY_PROMPT = """\
Please create a well-structured summary of the following text:

{layout}

TEXT TO SUMMARIZE:
{text}
"""

ASK_PROMPT = """\
You are an educational assistant answering questions about a YouTube video.

The title of the video is: "{title}"

Below is the transcript of the video that you should use as context to answer \
the question. Please provide a detailed, accurate answer based only on the \
information in the transcript. If the answer is not in the transcript, please \
say "I don't have enough information in the video transcript to answer this \
question."

TRANSCRIPT:
{context}

QUESTION:
{question}

ANSWER:"""


def build_prompt(chunk: str, quantities: Quantities, file_name: str, file_type: str) -> str:
    """Build the question-set prompt for one chunk. Output is deterministic."""
    note = SHORT_INPUT_NOTE if len(chunk.strip()) < VERY_SHORT_INPUT else DOCUMENT_NOTE
    return QUESTION_SET_PROMPT.format(
        file_name=file_name,
        file_type=file_type,
        content=chunk,
        input_note=note,
        flashcards=quantities.flashcards,
        mcqs=quantities.mcqs,
        matching=quantities.matching,
        true_false=quantities.true_false,
        fill_in_blanks=quantities.fill_in_blanks,
    )


def build_more_prompt(transcript: str, title: str | None, category: str, quantity: int) -> str:
    if category not in MORE_QUESTIONS_SPECS:
        raise ValueError(f"Unknown question type: {category}")
    instruction, structure = MORE_QUESTIONS_SPECS[category]
    return MORE_QUESTIONS_PROMPT.format(
        instruction=instruction.format(quantity=quantity),
        title=title or "Educational Video",
        structure=structure,
        transcript=transcript[:MAX_TRANSCRIPT_CHARS],
    )


def build_transcript_quiz_prompt(chunk: str, title: str | None) -> str:
    return TRANSCRIPT_QUIZ_PROMPT.format(title=title or "Educational Video", content=chunk)


def build_summary_prompt(text: str, content_type: str | None = None, title: str | None = None) -> str:
    """Summary prompt; ``content_type == "youtube"`` selects the video wording."""
    if content_type == "youtube":
        return VIDEO_SUMMARY_PROMPT.format(
            title=title or "Educational Video",
            layout=_SUMMARY_LAYOUT,
            text=text[:MAX_TRANSCRIPT_CHARS],
        )
    return TEXT_SUMMARY_PROMPT.format(layout=_SUMMARY_LAYOUT, text=text[:MAX_TRANSCRIPT_CHARS])


def build_ask_prompt(question: str, context: str, title: str | None = None) -> str:
    return ASK_PROMPT.format(
        title=title or "Unknown",
        context=context[:MAX_TRANSCRIPT_CHARS],
        question=question,
    )
