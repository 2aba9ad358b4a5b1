SYSTEM_PROMPT = (
    "You are a quiz generator. Return only valid JSON arrays with no markdown "
    "formatting or extra text. Never add ```json``` or any other formatting "
    "around the JSON."
)


def build_quiz_prompt(topic: str, num_questions: int, batch: int, starting_id: int) -> str:
    """User prompt asking for one batch of questions as a raw JSON array."""
    last_id = starting_id + num_questions - 1

    return f"""Generate exactly {num_questions} multiple choice questions about "{topic}".
This is batch {batch} of a larger quiz (questions {starting_id}-{last_id}).

RETURN ONLY VALID JSON - NO OTHER TEXT OR FORMATTING.

DIFFICULTY REQUIREMENTS:
- 60% of questions MUST be "hard" difficulty
- 30% can be "medium" difficulty
- 10% "easy" questions allowed

QUESTION CRITERIA:
1. Real-world scenarios that need multi-step reasoning
2. Edge cases, performance implications and scaling concerns
3. Advanced concepts, design patterns and architectural decisions
4. Subtle differences between options
5. Understanding over memorization

Format Example:
[
  {{
    "id": {starting_id},
    "question": "Question text here?",
    "options": [
      "First option",
      "Second option",
      "Third option",
      "Fourth option"
    ],
    "correctAnswers": [0],
    "multipleChoice": false,
    "difficulty": "hard",
    "explanation": "Why the correct option is correct.",
    "category": "{topic}"
  }}
]

RULES:
- Each question has exactly 4 options
- All options must be plausible - no obviously wrong answers
- correctAnswers array contains indices (0,1,2,3) of correct options
- Set multipleChoice to true only when more than one option is correct
- Keep each explanation short
- Start question IDs from {starting_id}
- Vary difficulty and question types for batch {batch}

Generate {num_questions} questions now:"""
