"""
assistant/prompts.py

Prompt templates for the three pipeline stages and the refusal translation.
Builders take plain values (message text, context, language name) and return strings.
"""

import json

from assistant.session import ConversationContext


CONTEXT_ANALYSIS_PROMPT = (
    "You're analyzing conversation context. Examine the message and determine:\n"
    "1. If it mentions a location (country, city, region), extract it.\n"
    "2. What topic is being discussed (cuisine, attractions, hotels, etc.)\n"
    "3. If it's a short reply to a previous question, note that.\n"
    'Format your response exactly as: {"location": "location name or null", '
    '"topic": "topic name or null", "isFollowUp": true/false}'
)

TOPIC_GATE_PROMPT = (
    "You determine if a message can be interpreted as related to tourism, travel, destinations, "
    "attractions, restaurants, food, local customs, or travel advice.\n"
    'Respond with ONLY "yes" for:\n'
    "- Questions directly about travel, tourism, destinations, attractions\n"
    "- Questions about locations, food, cuisine, culture that could have a travel context\n"
    "- Brief messages that refer to previous travel-related questions\n"
    "- One-word location names or follow-ups to travel questions\n"
    'Be very permissive - if there\'s any way to interpret the query in a travel context, respond "yes".'
)

REFUSAL_TEMPLATE = (
    "I'm a tourist assistant and can only answer questions related to travel, destinations, "
    "attractions, restaurants, local customs, or travel advice. Could you please ask me about a "
    "specific travel destination, attraction, or travel planning advice?"
)

FALLBACK_REFUSAL = "I'm a tourist assistant. Please ask travel-related questions."

# Topic labels the classifier emits that read badly in a rewritten follow-up.
TOPIC_ALIASES = {"cuisine": "local foods and dishes"}

FOLLOW_UP_MAX_CHARS = 20


def context_turn(context: ConversationContext, message: str):
    """User turn shared by the classifier and the topic gate."""
    return f"Previous context: {json.dumps(context.to_dict(), ensure_ascii=False)}\nCurrent message: {message}"


def system_instruction(language_name: str, context: ConversationContext):
    """Tourist-assistant instruction; adds a line per known context field."""
    lines = [
        "You are a helpful tourist assistant chatbot. Provide informative and friendly responses about "
        "travel destinations, attractions, restaurants, local customs, and travel advice.",
        "IMPORTANT:",
        f"- Respond in {language_name}. Make sure your entire response is in this language.",
        "- Be conversational and engaging, not overly formal.",
        "- Keep responses concise but informative.",
    ]
    if context.location:
        lines.append(f"- The user is asking about {context.location}.")
    if context.last_topic:
        lines.append(f"- The current topic is {context.last_topic}.")
    if context.is_follow_up:
        lines.append("- This appears to be a follow-up to the previous conversation. Maintain context.")
    return "\n".join(lines)


def refusal_prompt(language_name: str):
    return f'Translate the following message to {language_name}:\n"{REFUSAL_TEMPLATE}"'


def expand_follow_up(message: str, context: ConversationContext):
    """Rewrite a short follow-up ("Rome") into a full question about the running topic.

    Applies only when the message is under FOLLOW_UP_MAX_CHARS characters and the
    context marks a follow-up with a known topic; otherwise returns `message`.
    """
    if len(message) >= FOLLOW_UP_MAX_CHARS:
        return message
    if not (context.is_follow_up and context.last_topic):
        return message
    topic = TOPIC_ALIASES.get(context.last_topic, context.last_topic)
    return f"For {message}, tell me about {topic}"
