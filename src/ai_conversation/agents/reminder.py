"""
Periodic steering reminders appended to outgoing prompts.
"""
REMINDER_MARKER = "Reminder:"


def should_inject(round_number: int, interval: int) -> bool:
    """True when reminders are enabled and `round_number` falls on the interval."""
    return interval > 0 and round_number % interval == 0


def apply_reminder(prompt: str, reminder_text: str, round_number: int, interval: int) -> str:
    """
    Append the reminder to `prompt` when it is due.

    Args:
        prompt: Outgoing prompt
        reminder_text: Steering text; empty or whitespace disables injection
        round_number: Round of the outgoing prompt
        interval: Rounds between injections; 0 disables

    Returns:
        The prompt, with "Reminder: <text>" after a blank line when due
    """
    if not should_inject(round_number, interval) or not (reminder_text or "").strip():
        return prompt
    return f"{prompt}\n\n{REMINDER_MARKER} {reminder_text.strip()}"
