import logging
from functools import wraps
from urllib.parse import urlsplit

from flask import Flask, flash, redirect, render_template_string, request, session, url_for

from .config import QUALITY_OPTIONS, SITE_CATEGORIES
from .errors import AuthFailure, ConsoleBusy, GatewayFailure, ValidationFailure
from .records import RecordFields

logger = logging.getLogger(__name__)

# ======================================================================
# --- HTML Templates ---
# ======================================================================

base_css = """
<style>
  body { font-family: sans-serif; background: #000; color: #fff; padding: 20px; }
  .container { max-width: 900px; margin: auto; }
  input, textarea, select { padding: 8px; background: #111; color: #fff; border: 1px solid #333; }
  .btn { padding: 8px 16px; background: #f5c518; color: #000; border: none; font-weight: bold; cursor: pointer; }
  .flash { padding: 10px; background: #222; border-left: 4px solid #f5c518; margin-bottom: 10px; }
  table { width: 100%; border-collapse: collapse; } th, td { border: 1px solid #333; padding: 8px; }
</style>
"""

flash_html = """{% with messages = get_flashed_messages() %}{% for m in messages %}<div class="flash">{{ m }}</div>{% endfor %}{% endwith %}"""

login_html = """
<!DOCTYPE html><html><head><title>Admin Access</title>""" + base_css + """</head><body><div class="container">
<h1>Admin Access</h1><p>Restricted area for authorized personnel only.</p>
""" + flash_html + """
<form method="post" action="{{ url_for('login') }}">
  <input type="text" name="email" placeholder="Admin Email" value="{{ email|default('') }}">
  <input type="password" name="password" placeholder="Password">
  {% if error %}<p style="color:#f55;">{{ error }}</p>{% endif %}
  <button type="submit" class="btn">Login to Console</button>
</form></div></body></html>
"""

admin_html = """
<!DOCTYPE html><html><head><title>Admin Console</title>""" + base_css + """</head><body><div class="container">
<p>Logged in as {{ operator }} | <a href="{{ url_for('manage_content') }}">Manage Content</a> | <a href="{{ url_for('bot_settings') }}">Bot Settings</a> | <a href="{{ url_for('logout') }}">Logout</a></p>
""" + flash_html + """
<h2>{{ 'Edit Content' if draft.is_editing else 'Add New Content' }}</h2>
{% if draft.is_editing %}<form method="post" action="{{ url_for('cancel_edit') }}"><button class="btn" type="submit">Cancel Edit</button></form>{% endif %}
<form method="post" action="{{ url_for('save_draft') }}">
  <p><label>Title</label><input name="title" value="{{ fields.title }}" placeholder="Movie Name..."></p>
  <p><label>Category</label><select name="category">{% for c in categories %}<option {% if c == fields.category %}selected{% endif %}>{{ c }}</option>{% endfor %}</select>
     <label>Year</label><input name="year" value="{{ fields.year }}"></p>
  <p><label>Thumbnail URL</label><input name="thumbnail" value="{{ fields.thumbnail }}" placeholder="https://image-link.jpg"></p>
  <p><label>Description</label><textarea name="description">{{ fields.description }}</textarea></p>
  <p><label>Rating</label><input name="rating" value="{{ fields.rating }}">
     <label>Quality</label><select name="quality">{% for q in qualities %}<option {% if q == fields.quality %}selected{% endif %}>{{ q }}</option>{% endfor %}</select>
     <label>File Code</label><input name="telegram_code" value="{{ fields.telegram_code }}" placeholder="Movie Code"></p>
  <fieldset><legend>Episodes / Seasons</legend>
     <input name="ep_season" value="{{ ep_season }}" placeholder="S1" size="3">
     <input name="ep_title" placeholder="Ep Title">
     <input name="ep_duration" placeholder="24m" size="5">
     <input name="ep_code" placeholder="Code">
     <button class="btn" type="submit" name="action" value="add_episode">+</button>
  </fieldset>
  <button class="btn" type="submit" name="action" value="publish">{{ 'UPDATE CONTENT' if draft.is_editing else 'PUBLISH NOW' }}</button>
</form>
{% for season, eps in seasons.items() %}
  <h4>Season {{ season }}</h4>
  {% for ep in eps %}
  <form method="post" action="{{ url_for('remove_episode', episode_id=ep.id) }}">
    S{{ ep.season }} {{ ep.number }}. {{ ep.title }} ({{ ep.duration }}) <code>{{ ep.telegram_code }}</code>
    <button type="submit">x</button>
  </form>
  {% endfor %}
{% endfor %}
</div></body></html>
"""

manage_html = """
<!DOCTYPE html><html><head><title>Manage Content</title>""" + base_css + """</head><body><div class="container">
<p><a href="{{ url_for('admin') }}">Upload / Edit</a> | <a href="{{ url_for('bot_settings') }}">Bot Settings</a></p>
""" + flash_html + """
<h2>Manage Library ({{ movies|length }})</h2>
<form method="post" action="{{ url_for('seed_data') }}" onsubmit="return confirm('This will upload all demo data. Continue?')"><button class="btn" type="submit">Upload Demo Data</button></form>
{% if movies %}
<table><thead><tr><th>Title</th><th>Category</th><th>Rating</th><th>Actions</th></tr></thead><tbody>
{% for movie in movies %}
<tr><td>{{ movie.title }}</td><td>{{ movie.category }}</td><td>{{ movie.rating }} &#9733;</td>
<td><form method="post" action="{{ url_for('edit_movie', movie_id=movie.id) }}" style="display:inline"><button type="submit">Edit</button></form>
    <form method="post" action="{{ url_for('delete_movie', movie_id=movie.id) }}" style="display:inline" onsubmit="return confirm('Are you sure you want to delete this content?')"><button type="submit">Delete</button></form></td></tr>
{% endfor %}
</tbody></table>
{% else %}<p>No content in database. Use "Upload Demo Data" to get started.</p>{% endif %}
</div></body></html>
"""

settings_html = """
<!DOCTYPE html><html><head><title>Bot Configuration</title>""" + base_css + """</head><body><div class="container">
<p><a href="{{ url_for('admin') }}">Upload / Edit</a> | <a href="{{ url_for('manage_content') }}">Manage Content</a></p>
""" + flash_html + """
<h2>Bot Configuration</h2>
<form method="post" action="{{ url_for('bot_settings') }}">
  <p><label>Telegram Bot Username</label><input name="bot_username" value="{{ settings.bot_username }}" placeholder="e.g. Cineflix_Streembot"></p>
  <p><label>Main Channel Link</label><input name="channel_link" value="{{ settings.channel_link }}" placeholder="https://t.me/yourchannel"></p>
  <button class="btn" type="submit">Save Configuration</button>
</form>
<p>Deep links look like <code>{{ settings.deep_link('CODE') }}</code></p>
</div></body></html>
"""


def create_app(console, secret_key: str) -> Flask:
    """Flask operator console driving ``console`` (an ``AdminConsole``)."""
    app = Flask(__name__)
    app.secret_key = secret_key

    # --- Authentication ---
    def is_operator():
        return console.signed_in and session.get("console_token") == console.session.token

    def requires_login(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            if not is_operator():
                return redirect(url_for("login"))
            return f(*args, **kwargs)
        return decorated

    def back():
        """Redirect to the page the form came from, if it is one of ours."""
        referrer = request.referrer
        if referrer and urlsplit(referrer).netloc == request.host:
            return redirect(referrer)
        return redirect(url_for("admin"))

    # --- Error Handlers ---
    @app.errorhandler(ValidationFailure)
    def on_validation_failure(e):
        flash(str(e))
        return back()

    @app.errorhandler(GatewayFailure)
    def on_gateway_failure(e):
        flash(str(e))
        return back()

    @app.errorhandler(ConsoleBusy)
    def on_busy(e):
        flash("Still processing, please wait...")
        return back()

    @app.errorhandler(AuthFailure)
    def on_auth_failure(e):
        return redirect(url_for("login"))

    # --- Routes ---
    @app.route("/")
    def index():
        return redirect(url_for("admin"))

    @app.route("/login", methods=["GET", "POST"])
    def login():
        if request.method == "GET":
            return render_template_string(login_html)
        email = request.form.get("email", "").strip()
        try:
            console_session = console.login(email, request.form.get("password", ""))
        except AuthFailure as e:
            return render_template_string(login_html, error=str(e), email=email), 401
        session["console_token"] = console_session.token
        return redirect(url_for("admin"))

    @app.route("/logout")
    def logout():
        if is_operator():
            console.logout()
        session.pop("console_token", None)
        return redirect(url_for("login"))

    @app.route("/admin")
    @requires_login
    def admin():
        draft = console.draft
        return render_template_string(
            admin_html,
            operator=console.session.auth.email,
            draft=draft,
            fields=draft.fields,
            seasons=draft.episodes.seasons(),
            ep_season=session.get("ep_season", "1"),
            categories=SITE_CATEGORIES,
            qualities=QUALITY_OPTIONS,
        )

    @app.route("/admin/draft", methods=["POST"])
    @requires_login
    def save_draft():
        form = request.form
        console.update_fields(**{name: form[name] for name in RecordFields.names() if name in form})

        action = form.get("action", "save")
        if action == "add_episode":
            season = form.get("ep_season", "1")
            console.add_episode(season, form.get("ep_title", ""), form.get("ep_duration", ""), form.get("ep_code", ""))
            session["ep_season"] = season
        elif action == "publish":
            editing = console.draft.is_editing
            console.publish()
            session.pop("ep_season", None)
            flash("Content Updated Successfully!" if editing else "Content Added Successfully!")
        return redirect(url_for("admin"))

    @app.route("/admin/episodes/<episode_id>/remove", methods=["POST"])
    @requires_login
    def remove_episode(episode_id):
        console.remove_episode(episode_id)
        return redirect(url_for("admin"))

    @app.route("/admin/cancel", methods=["POST"])
    @requires_login
    def cancel_edit():
        console.cancel_edit()
        session.pop("ep_season", None)
        return redirect(url_for("admin"))

    @app.route("/admin/manage")
    @requires_login
    def manage_content():
        try:
            movies = console.list_records()
        except GatewayFailure as e:
            logger.warning("Error fetching movies (offline mode?): %s", e)
            flash(str(e))
            movies = []
        return render_template_string(manage_html, movies=movies)

    @app.route("/admin/edit/<movie_id>", methods=["POST"])
    @requires_login
    def edit_movie(movie_id):
        console.start_edit(movie_id)
        return redirect(url_for("admin"))

    @app.route("/admin/delete/<movie_id>", methods=["POST"])
    @requires_login
    def delete_movie(movie_id):
        try:
            console.delete_record(movie_id)
        except GatewayFailure:
            flash("Error deleting movie")
        return redirect(url_for("manage_content"))

    @app.route("/admin/seed", methods=["POST"])
    @requires_login
    def seed_data():
        try:
            console.seed_demo_data()
            flash("Demo data uploaded successfully!")
        except GatewayFailure:
            flash("Error uploading data")
        return redirect(url_for("manage_content"))

    @app.route("/admin/settings", methods=["GET", "POST"])
    @requires_login
    def bot_settings():
        if request.method == "POST":
            try:
                console.save_settings(request.form.get("bot_username", ""), request.form.get("channel_link", ""))
                flash("App Configuration Saved!")
            except GatewayFailure:
                flash("Error saving settings")
            return redirect(url_for("bot_settings"))
        return render_template_string(settings_html, settings=console.load_settings())

    return app
