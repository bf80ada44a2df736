"""
Email body builders for single notifications.

Produces the HTML and plain text parts sent through the email channel.
"""

import html


def build_notification_html(
    title: str, message: str, unsubscribe_url: str | None = None
) -> str:
    """
    Build HTML email body for a notification.

    Args:
        title: Notification title (also the email subject)
        message: Notification message
        unsubscribe_url: Optional one-click opt-out link for the email channel

    Returns:
        HTML string
    """
    safe_title = html.escape(title)
    safe_message = html.escape(message).replace("\n", "<br>")

    body = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{safe_title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            max-width: 600px;
            margin: 0 auto;
            padding: 20px;
            background-color: #f5f5f5;
        }}
        .container {{
            background-color: white;
            padding: 30px;
            border-radius: 8px;
        }}
        h1 {{
            margin: 0 0 15px 0;
            color: #1e40af;
            font-size: 22px;
        }}
        .footer {{
            margin-top: 30px;
            padding-top: 20px;
            border-top: 1px solid #e5e7eb;
            font-size: 13px;
            color: #6b7280;
            text-align: center;
        }}
        .footer a {{
            color: #2563eb;
            text-decoration: none;
        }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{safe_title}</h1>
        <div class="message">{safe_message}</div>
"""

    if unsubscribe_url:
        body += f"""
        <div class="footer">
            <p>
                You received this email because email notifications are on for your account.
                <br>
                <a href="{html.escape(unsubscribe_url, quote=True)}">Turn off email notifications</a>
            </p>
        </div>
"""

    body += """
    </div>
</body>
</html>
"""
    return body


def build_notification_text(
    title: str, message: str, unsubscribe_url: str | None = None
) -> str:
    """Build plain text email body for a notification."""
    text = f"{title}\n{'=' * len(title)}\n\n{message}\n"

    if unsubscribe_url:
        text += f"\n---\nTurn off email notifications: {unsubscribe_url}\n"

    return text
