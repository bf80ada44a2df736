# Word lists for the keyword tone heuristic used when no language model is
# configured. Matching is case-insensitive substring matching, and each word
# counts at most once per message.

# Words that signal hostile or accusatory co-parenting messages.
NEGATIVE_WORDS = [
    "hate",
    "angry",
    "stupid",
    "idiot",
    "never",
    "always",
    "fault",
    "blame",
    "terrible",
    "worst",
]

# Words that signal cooperative messages.
POSITIVE_WORDS = [
    "thank",
    "please",
    "appreciate",
    "understand",
    "agree",
    "help",
    "support",
    "cooperate",
    "together",
]

TONE_KEYWORDS_DICT = {
    "negative": NEGATIVE_WORDS,
    "positive": POSITIVE_WORDS,
}
