"""Receipt generation and delivery package.

Renders a PDF receipt for a completed purchase, composes the HTML
email body, and sends both through an SMTP transport.  Every receipt
lives in its own scratch file which is removed once the send attempt
finishes.
"""
