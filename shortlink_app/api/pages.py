"""HTML pages served to visitors on the redirect path."""

from html import escape
from urllib.parse import quote

_STYLE = """
body{font:16px/1.5 system-ui,-apple-system,Segoe UI,Roboto,Arial,sans-serif;background:#f7f8fa;padding:32px}
.card{max-width:420px;margin:10vh auto;background:#fff;border-radius:12px;box-shadow:0 8px 24px rgba(0,0,0,.08);padding:24px}
h1{font-size:18px;margin:0 0 12px} .err{color:#b91c1c;background:#fee2e2;border-radius:8px;padding:8px 10px;margin-bottom:10px}
input{width:100%;padding:10px 12px;border:1px solid #ddd;border-radius:8px}
button{margin-top:12px;width:100%;padding:10px 12px;border:0;border-radius:8px;background:#22c55e;color:#fff;font-weight:600}
"""

NOT_FOUND_PAGE = f"""<!doctype html><meta charset="utf-8">
<title>Link not found</title>
<style>{_STYLE}</style>
<div class="card">
  <h1>404 - Link not found</h1>
  <p>This short link does not exist. Check the address and try again.</p>
</div>"""


def password_prompt_page(slug: str, wrong_password: bool) -> str:
    """
    Form asking for the link's access password.

    Submits back to ``/<slug>`` with GET so the password arrives as ``?p=``.
    """
    if wrong_password:
        notice = '<div class="err">Wrong password, please try again.</div>'
    else:
        notice = '<p>Enter the password to continue.</p>'

    action = escape("/" + quote(slug, safe=""))
    return f"""<!doctype html><meta charset="utf-8">
<title>Password required</title>
<style>{_STYLE}</style>
<div class="card">
  <h1>This short link is password protected</h1>
  {notice}
  <form method="GET" action="{action}">
    <input type="password" name="p" placeholder="Access password" autofocus />
    <button type="submit">Verify and continue</button>
  </form>
</div>"""
