from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from starlette.datastructures import FormData

from luvrix_admin import ui
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.schemas import BlogIn
from luvrix_admin.security.guard import AdminContext, require_admin
from luvrix_admin.services.audit import record_admin_action
from luvrix_admin.services.filters import filter_blogs, filter_drafts
from luvrix_admin.services.platform_client import PlatformClient, fetch_parallel
from luvrix_admin.services.settings_sections import AdminMangaLayout
from luvrix_admin.services.text import generate_blog_slug, split_tags
from luvrix_admin.services.validation import parse_int, validate_blog, validate_draft, validate_manga

router = APIRouter(prefix="/admin", tags=["admin-content"])

BLOG_STATUSES = [("all", "All"), ("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")]
DRAFT_FILTERS = [("draft", "Drafts"), ("published", "Published"), ("all", "All")]
BLOG_CATEGORIES = [
    "News", "Anime", "Manga", "Technology", "Gaming", "Entertainment",
    "Lifestyle", "Sports", "Business", "Health", "General",
]
MANGA_VIEW_TYPES = [("grid", "Grid"), ("list", "List"), ("table", "Table")]
MANGA_COLUMNS = [(c, str(c)) for c in (2, 3, 4, 5, 6)]
MANGA_CARD_SIZES = [("small", "Small"), ("medium", "Medium"), ("large", "Large")]
MANGA_STATUSES = [("Ongoing", "Ongoing"), ("Completed", "Completed"), ("Hiatus", "Hiatus")]

BLOG_FILTER_HTML = """
<form method="get" action="/admin/blogs" class="flex flex-wrap items-end gap-3">
  <input type="text" name="q" value="{q}" placeholder="Search title, category or author" class="{input_class} max-w-xs">
  <select name="status" class="{input_class} max-w-[10rem]">{statuses}</select>
  <select name="author" class="{input_class} max-w-xs">{authors}</select>
  <button class="{button_class}">Filter</button>
  <a href="/admin/create-blog" class="{button_class} ml-auto">New Blog</a>
</form>
"""

CREATE_BLOG_HTML = """
<form method="post" action="/admin/create-blog" class="space-y-4">
  {title}
  <label class="block"><span class="text-sm font-semibold text-slate-700">Category</span>
    <select name="category" class="{input_class} mt-1">{categories}</select></label>
  {featured}
  {content}
  {tags}
  <details class="rounded-xl border border-slate-100 p-4">
    <summary class="font-semibold text-sm cursor-pointer">SEO</summary>
    <div class="space-y-4 mt-4">{seo_title}{seo_description}{focus_keyword}</div>
  </details>
  <div class="flex gap-3">
    <button name="status" value="approved" class="{button_class}">Publish</button>
    <button name="status" value="pending" class="px-5 py-2.5 bg-slate-100 rounded-xl font-semibold">Save as Pending</button>
  </div>
</form>
"""

REJECT_FORM_HTML = """
<form method="post" action="/admin/blogs/{blog_id}/reject" class="inline-flex gap-1">
  <input type="text" name="reason" placeholder="Reason" class="text-xs border border-slate-200 rounded-lg px-2 py-1 w-28">
  <button class="text-xs px-3 py-1.5 rounded-lg font-medium bg-red-50 text-red-600">Reject</button>
</form>
"""

PREVIEW_HTML = """
<section class="bg-white rounded-2xl shadow-sm border border-slate-100 p-6 space-y-4">
  <div class="flex items-center justify-between">
    <div>
      <div class="text-xs uppercase tracking-widest text-slate-400">{category}</div>
      <h2 class="text-2xl font-bold">{title}</h2>
      <div class="text-sm text-slate-500">By {author} &middot; {created} &middot; {status}</div>
    </div>
    <div class="flex gap-2">{actions}</div>
  </div>
  {image}
  <iframe sandbox srcdoc="{content}" class="w-full min-h-[32rem] border border-slate-100 rounded-xl"></iframe>
</section>
"""

DRAFT_FORM_HTML = """
<form method="post" action="/admin/edit-draft" class="space-y-4">
  <input type="hidden" name="id" value="{draft_id}">
  {title}
  {slug}
  <label class="block"><span class="text-sm font-semibold text-slate-700">Category</span>
    <select name="category" class="{input_class} mt-1">{categories}</select></label>
  {thumbnail}
  {excerpt}
  {content}
  {seo_title}
  {seo_description}
  {keywords}
  <div class="flex gap-3">
    <button name="action" value="save" class="px-5 py-2.5 bg-slate-100 rounded-xl font-semibold">Save Draft</button>
    <button name="action" value="publish" class="{button_class}" onclick="return {publish_confirm}">Publish</button>
  </div>
</form>
"""

MANGA_FORM_HTML = """
<form method="post" action="{action}" class="grid md:grid-cols-2 gap-4">
  {title}
  {slug}
  {author}
  {genre}
  <label class="block"><span class="text-sm font-semibold text-slate-700">Status</span>
    <select name="status" class="{input_class} mt-1">{statuses}</select></label>
  {total_chapters}
  {redirect_base_url}
  {chapter_format}
  {chapter_padding}
  {cover_url}
  <div class="md:col-span-2">{alternative_names}</div>
  <div class="md:col-span-2">{description}</div>
  {seo_title}
  {focus_keyword}
  <div class="md:col-span-2">{seo_description}</div>
  <div class="md:col-span-2 flex gap-6">{show_web}{show_android}{show_ios}</div>
  <div class="md:col-span-2 flex gap-3">
    <button class="{button_class}">{submit}</button>
    {cancel}
  </div>
</form>
"""

MANGA_LAYOUT_HTML = """
<form method="post" action="/admin/manga/layout" class="flex flex-wrap items-end gap-3">
  <label class="block"><span class="text-xs font-semibold text-slate-500">View</span>
    <select name="viewType" class="{input_class} mt-1">{view_types}</select></label>
  <label class="block"><span class="text-xs font-semibold text-slate-500">Columns</span>
    <select name="columns" class="{input_class} mt-1">{columns}</select></label>
  <label class="block"><span class="text-xs font-semibold text-slate-500">Card size</span>
    <select name="cardSize" class="{input_class} mt-1">{card_sizes}</select></label>
  <button class="{button_class}">Save Layout</button>
</form>
"""


def lookup_authors(client: PlatformClient, blogs: list[dict]) -> dict[str, dict]:
    """Resolve each distinct author once. Authors that fail to load are left out."""
    ids = sorted({str(b["authorId"]) for b in blogs if b.get("authorId")})

    def one(user_id):
        try:
            return client.get_user(user_id)
        except ApiError as e:
            log_event("author_lookup_failed", level="warning", user_id=user_id, error=e.message)
            return None

    found = fetch_parallel(*[lambda uid=uid: one(uid) for uid in ids])
    return {uid: user for uid, user in zip(ids, found) if user}


def notify_author(client: PlatformClient, blog: dict, kind: str):
    """Email the author about a moderation decision. Delivery problems never fail the action."""
    author_id = blog.get("authorId")
    if not author_id:
        return
    try:
        author = client.get_user(author_id)
        if author and author.get("email"):
            client.send_email(kind, author["email"], {"name": author.get("name") or "User", "blogTitle": blog.get("title")})
    except ApiError as e:
        log_event("author_email_failed", level="warning", kind=kind, blog_id=str(blog.get("id")), error=e.message)


def _moderate(ctx: AdminContext, blog_id: str, approve: bool, reason: str | None = None):
    client = ctx.client
    try:
        blog = client.get_blog(blog_id)
    except ApiError as e:
        log_event("blog_lookup_failed", level="warning", blog_id=blog_id, error=e.message)
        blog = {"id": blog_id}

    if approve:
        client.approve_blog(blog_id)
        record_admin_action(client, ctx.user.id, "Approved Blog", blog_id)
        notify_author(client, blog, "blogApproved")
    else:
        client.reject_blog(blog_id, reason)
        record_admin_action(client, ctx.user.id, "Rejected Blog", blog_id)
        notify_author(client, blog, "blogRejected")


# --- blogs ---

@router.get("/blogs", response_class=HTMLResponse)
def blogs_page(
    status: str = "all",
    author: str = "all",
    q: str = "",
    msg: str | None = None,
    error: str | None = None,
    ctx: AdminContext = Depends(require_admin),
):
    try:
        blogs = ctx.client.get_all_blogs(include_all=True) or []
    except ApiError as e:
        log_event("blogs_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Blogs", "", error=e.message)

    authors = lookup_authors(ctx.client, blogs)
    shown = filter_blogs(blogs, status=status, author_id=author, query=q, authors=authors)

    author_options = [("all", "All authors")] + [
        (uid, u.get("name") or u.get("email") or uid) for uid, u in sorted(authors.items(), key=lambda kv: str(kv[1].get("name") or ""))
    ]
    filters = BLOG_FILTER_HTML.format(
        q=ui.esc(q),
        statuses=ui.options(BLOG_STATUSES, status),
        authors=ui.options(author_options, author),
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )

    rows = []
    for b in shown:
        bid = str(b.get("id"))
        writer = authors.get(str(b.get("authorId")), {})
        actions = [f'<a href="/admin/preview-blog?id={ui.esc(bid)}" class="{ui.SMALL_BUTTON_CLASS} bg-slate-100 text-slate-700">Preview</a>']
        if b.get("status") != "approved":
            actions.append(ui.post_button(f"/admin/blogs/{bid}/approve", "Approve", css="bg-green-50 text-green-700"))
        if b.get("status") != "rejected":
            actions.append(REJECT_FORM_HTML.format(blog_id=ui.esc(bid)))
        actions.append(ui.post_button(f"/admin/blogs/{bid}/delete", "Delete", css="bg-red-600 text-white", confirm="Are you sure you want to delete this blog?"))
        rows.append(
            f'<tr><td class="px-4 py-3 font-medium">{ui.esc(b.get("title"))}</td>'
            f'<td class="px-4 py-3">{ui.esc(writer.get("name") or b.get("authorName") or "Unknown")}<div class="text-xs text-slate-400">{ui.esc(writer.get("email"))}</div></td>'
            f'<td class="px-4 py-3">{ui.esc(b.get("category"))}</td>'
            f'<td class="px-4 py-3">{ui.status_badge(b.get("status"))}</td>'
            f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(b.get("createdAt"))}</td>'
            f'<td class="px-4 py-3 space-x-1 whitespace-nowrap">{"".join(actions)}</td></tr>'
        )

    content = ui.card(filters) + f'<p class="text-sm text-slate-500">Showing {len(shown)} of {len(blogs)} blogs</p>' + ui.table(
        ["Title", "Author", "Category", "Status", "Created", ""], rows, empty="No blogs match these filters"
    )
    return ui.page(ctx, "Blogs", content, msg=msg, error=error)


@router.post("/blogs/{blog_id}/approve")
def approve_blog(blog_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        _moderate(ctx, blog_id, approve=True)
    except ApiError as e:
        return ui.redirect("/admin/blogs", error=e.message)
    return ui.redirect("/admin/blogs", msg="Blog approved")


@router.post("/blogs/{blog_id}/reject")
def reject_blog(blog_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        _moderate(ctx, blog_id, approve=False, reason=(form.get("reason") or "").strip() or None)
    except ApiError as e:
        return ui.redirect("/admin/blogs", error=e.message)
    return ui.redirect("/admin/blogs", msg="Blog rejected")


@router.post("/blogs/{blog_id}/delete")
def delete_blog(blog_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        ctx.client.delete_blog(blog_id)
    except ApiError as e:
        return ui.redirect("/admin/blogs", error=e.message)
    record_admin_action(ctx.client, ctx.user.id, "Deleted Blog", blog_id)
    return ui.redirect("/admin/blogs", msg="Blog deleted")


def _blog_form(values: dict) -> str:
    return CREATE_BLOG_HTML.format(
        title=ui.field("Title", "title", values.get("title", "")),
        categories=ui.options([(c, c) for c in BLOG_CATEGORIES], values.get("category", "General")),
        featured=ui.field("Featured image URL", "featuredImage", values.get("featuredImage", "")),
        content=ui.textarea("Content (HTML)", "content", values.get("content", ""), rows=16),
        tags=ui.field("Tags", "tags", values.get("tags", ""), placeholder="anime, review, news"),
        seo_title=ui.field("SEO title", "seoTitle", values.get("seoTitle", "")),
        seo_description=ui.textarea("SEO description", "seoDescription", values.get("seoDescription", ""), rows=2),
        focus_keyword=ui.field("Focus keyword", "focusKeyword", values.get("focusKeyword", "")),
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )


@router.get("/create-blog", response_class=HTMLResponse)
def create_blog_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    return ui.page(ctx, "Create Blog", ui.card(_blog_form({})), msg=msg, error=error)


@router.post("/create-blog")
def create_blog(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    values = {k: form.get(k) or "" for k in ("title", "category", "featuredImage", "content", "tags", "seoTitle", "seoDescription", "focusKeyword")}
    try:
        validate_blog(values["title"], values["content"])
        blog = BlogIn(
            title=values["title"].strip(),
            slug=generate_blog_slug(values["title"]),
            content=values["content"],
            category=values["category"] or "General",
            seoTitle=values["seoTitle"],
            seoDescription=values["seoDescription"],
            focusKeyword=values["focusKeyword"],
            featuredImage=values["featuredImage"],
            tags=split_tags(values["tags"]),
            status="pending" if form.get("status") == "pending" else "approved",
            authorId=ctx.user.id,
            authorEmail=ctx.user.email,
        )
        created = ctx.client.create_blog(blog.to_wire())
    except ValidationError as e:
        return ui.page(ctx, "Create Blog", ui.card(_blog_form(values)), error=e.message, status_code=400)
    except ApiError as e:
        return ui.page(ctx, "Create Blog", ui.card(_blog_form(values)), error=f"Failed to create blog: {e.message}", status_code=400)

    record_admin_action(ctx.client, ctx.user.id, "Created Blog (Admin)", (created or {}).get("id"))
    return ui.redirect("/admin/blogs", msg="Blog created")


@router.get("/preview-blog", response_class=HTMLResponse)
def preview_blog(id: str = "", msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    if not id:
        return ui.redirect("/admin/blogs", error="Blog not found")
    try:
        blog = ctx.client.get_blog(id)
    except ApiError as e:
        return ui.redirect("/admin/blogs", error=e.message if e.status_code != 404 else "Blog not found")

    author = lookup_authors(ctx.client, [blog]).get(str(blog.get("authorId")), {})
    actions = ""
    if blog.get("status") != "approved":
        actions += ui.post_button(f"/admin/blogs/{id}/approve", "Approve", css="bg-green-600 text-white")
    if blog.get("status") != "rejected":
        actions += REJECT_FORM_HTML.format(blog_id=ui.esc(id))
    image = f'<img src="{ui.esc(blog["featuredImage"])}" alt="" class="w-full max-h-96 object-cover rounded-xl">' if blog.get("featuredImage") else ""
    content = PREVIEW_HTML.format(
        category=ui.esc(blog.get("category")),
        title=ui.esc(blog.get("title")),
        author=ui.esc(author.get("name") or blog.get("authorName") or "Unknown"),
        created=ui.fmt_date(blog.get("createdAt")),
        status=ui.status_badge(blog.get("status")),
        actions=actions,
        image=image,
        content=ui.esc(blog.get("content")),
    )
    return ui.page(ctx, "Preview Blog", content, msg=msg, error=error)


# --- drafts ---

@router.get("/drafts", response_class=HTMLResponse)
def drafts_page(
    filter: str = "draft",
    q: str = "",
    highlight: str | None = None,
    msg: str | None = None,
    error: str | None = None,
    ctx: AdminContext = Depends(require_admin),
):
    try:
        drafts = ctx.client.get_blog_drafts() or []
    except ApiError as e:
        log_event("drafts_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Draft Queue", "", error=e.message)

    shown = filter_drafts(drafts, status=filter, query=q)
    counts = "".join([
        ui.stat_card("Drafts", sum(1 for d in drafts if d.get("status") == "draft")),
        ui.stat_card("Published", sum(1 for d in drafts if d.get("status") == "published")),
        ui.stat_card("AI Generated", sum(1 for d in drafts if d.get("isAIGenerated"))),
    ])
    tabs = "".join(
        f'<a href="/admin/drafts?filter={key}" class="px-3 py-1.5 rounded-lg text-xs font-semibold {"bg-pink-600 text-white" if key == filter else "bg-slate-100 text-slate-600"}">{label}</a>'
        for key, label in DRAFT_FILTERS
    )
    search = (
        '<form method="get" action="/admin/drafts" class="flex gap-2 ml-auto">'
        f'<input type="hidden" name="filter" value="{ui.esc(filter)}">'
        f'<input type="text" name="q" value="{ui.esc(q)}" placeholder="Search drafts" class="{ui.INPUT_CLASS}"></form>'
    )

    ai_tag = ' <span class="text-xs text-purple-600">AI</span>'
    rows = []
    for d in shown:
        did = str(d.get("id"))
        mark = " bg-pink-50" if highlight and did == highlight else ""
        actions = f'<a href="/admin/edit-draft?id={ui.esc(did)}" class="{ui.SMALL_BUTTON_CLASS} bg-slate-100 text-slate-700">Edit</a>'
        if d.get("status") != "published":
            confirm = None if d.get("thumbnail") else "This draft has no thumbnail image. Do you want to publish anyway?"
            actions += ui.post_button(f"/admin/drafts/{did}/publish", "Publish", css="bg-green-600 text-white", confirm=confirm)
        actions += ui.post_button(f"/admin/drafts/{did}/delete", "Delete", css="bg-red-50 text-red-600", confirm="Delete this draft?")
        rows.append(
            f'<tr class="{mark}"><td class="px-4 py-3"><div class="font-medium">{ui.esc(d.get("title"))}</div>'
            f'<div class="text-xs text-slate-400">{ui.esc(d.get("topic") or "")}</div></td>'
            f'<td class="px-4 py-3">{ui.esc(d.get("category"))}</td>'
            f'<td class="px-4 py-3">{ui.status_badge(d.get("status"))}{ai_tag if d.get("isAIGenerated") else ""}</td>'
            f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(d.get("createdAt"))}</td>'
            f'<td class="px-4 py-3 space-x-1 whitespace-nowrap">{actions}</td></tr>'
        )

    content = (
        f'<div class="grid grid-cols-3 gap-4">{counts}</div>'
        + f'<div class="flex items-center gap-2">{tabs}{search}</div>'
        + ui.table(["Title", "Category", "Status", "Created", ""], rows, empty="No drafts yet. Generate one from Trending Topics.")
    )
    return ui.page(ctx, "Draft Queue", content, msg=msg, error=error)


def _publish_payload(ctx: AdminContext) -> dict:
    return {"authorId": ctx.user.id, "authorName": ctx.user.display_name, "authorPhoto": ctx.user.photo_url or ""}


@router.post("/drafts/{draft_id}/publish")
def publish_draft(draft_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        ctx.client.publish_blog_draft(draft_id, _publish_payload(ctx))
    except ApiError as e:
        return ui.redirect("/admin/drafts", error=f"Failed to publish: {e.message}")
    log_event("draft_published", draft_id=draft_id)
    return ui.redirect("/admin/drafts", msg="Blog published successfully!")


@router.post("/drafts/{draft_id}/delete")
def delete_draft(draft_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        ctx.client.delete_blog_draft(draft_id)
    except ApiError as e:
        return ui.redirect("/admin/drafts", error=f"Failed to delete draft: {e.message}")
    return ui.redirect("/admin/drafts", msg="Draft deleted")


def _draft_form(draft_id: str, d: dict) -> str:
    keywords = d.get("keywords") or []
    if isinstance(keywords, list):
        keywords = ", ".join(keywords)
    return DRAFT_FORM_HTML.format(
        draft_id=ui.esc(draft_id),
        title=ui.field("Title", "title", d.get("title", "")),
        slug=ui.field("Slug", "slug", d.get("slug", "")),
        categories=ui.options([(c, c) for c in BLOG_CATEGORIES], d.get("category") or "General"),
        thumbnail=ui.field("Thumbnail URL", "thumbnail", d.get("thumbnail", "")),
        excerpt=ui.textarea("Excerpt", "excerpt", d.get("excerpt", ""), rows=2),
        content=ui.textarea("Content (HTML)", "content", d.get("content", ""), rows=18),
        seo_title=ui.field("SEO title", "seoTitle", d.get("seoTitle", "")),
        seo_description=ui.textarea("SEO description", "seoDescription", d.get("seoDescription", ""), rows=2),
        keywords=ui.field("Keywords", "keywords", keywords, placeholder="comma separated"),
        publish_confirm="true" if d.get("thumbnail") else "confirm('No thumbnail image set. Publish anyway?')",
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )


@router.get("/edit-draft", response_class=HTMLResponse)
def edit_draft_page(id: str = "", msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    if not id:
        return ui.redirect("/admin/drafts", error="Draft not found")
    try:
        draft = ctx.client.get_blog_draft(id)
    except ApiError as e:
        log_event("draft_load_failed", level="warning", draft_id=id, status_code=e.status_code, error=e.message)
        return ui.redirect("/admin/drafts", error="Draft not found" if e.status_code == 404 else "Failed to load draft")
    return ui.page(ctx, "Edit Draft", ui.card(_draft_form(id, draft or {})), msg=msg, error=error)


@router.post("/edit-draft")
def edit_draft_submit(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    draft_id = form.get("id") or ""
    if not draft_id:
        return ui.redirect("/admin/drafts", error="Draft not found")
    back = f"/admin/edit-draft?id={draft_id}"
    try:
        draft = validate_draft(dict(form))
        ctx.client.update_blog_draft(draft_id, draft.to_wire())
    except ValidationError as e:
        return ui.redirect(back, error=e.message)
    except ApiError as e:
        return ui.redirect(back, error=f"Failed to save: {e.message}")

    if form.get("action") != "publish":
        return ui.redirect(back, msg="Draft saved")

    try:
        ctx.client.publish_blog_draft(draft_id, _publish_payload(ctx))
    except ApiError as e:
        return ui.redirect(back, error=f"Failed to publish: {e.message}")
    log_event("draft_published", draft_id=draft_id)
    return ui.redirect("/admin/drafts", msg="Blog published successfully!")


# --- manga ---

def _manga_form(m: dict, manga_id: str | None = None) -> str:
    return MANGA_FORM_HTML.format(
        action=f"/admin/manga/{ui.esc(manga_id)}" if manga_id else "/admin/manga",
        title=ui.field("Title", "title", m.get("title", "")),
        slug=ui.field("Slug", "slug", m.get("slug", ""), placeholder="auto from title"),
        author=ui.field("Author", "author", m.get("author", "")),
        genre=ui.field("Genre", "genre", m.get("genre", "")),
        statuses=ui.options(MANGA_STATUSES, m.get("status") or "Ongoing"),
        total_chapters=ui.field("Total chapters", "totalChapters", m.get("totalChapters", 0), type_="number"),
        redirect_base_url=ui.field("Redirect base URL", "redirectBaseUrl", m.get("redirectBaseUrl", "")),
        chapter_format=ui.field("Chapter format", "chapterFormat", m.get("chapterFormat") or "chapter-{n}"),
        chapter_padding=ui.field("Chapter padding", "chapterPadding", m.get("chapterPadding", 0), type_="number"),
        cover_url=ui.field("Cover URL", "coverUrl", m.get("coverUrl", "")),
        alternative_names=ui.field("Alternative names", "alternativeNames", m.get("alternativeNames", "")),
        description=ui.textarea("Description", "description", m.get("description", "")),
        seo_title=ui.field("SEO title", "seoTitle", m.get("seoTitle", "")),
        focus_keyword=ui.field("Focus keyword", "focusKeyword", m.get("focusKeyword", "")),
        seo_description=ui.textarea("SEO description", "seoDescription", m.get("seoDescription", ""), rows=2),
        show_web=ui.checkbox("Web", "showOnWeb", m.get("showOnWeb", True)),
        show_android=ui.checkbox("Android", "showOnAndroid", m.get("showOnAndroid", True)),
        show_ios=ui.checkbox("iOS", "showOnIOS", m.get("showOnIOS", True)),
        submit="Update Manga" if manga_id else "Create Manga",
        cancel='<a href="/admin/manga" class="px-5 py-2.5 bg-slate-100 rounded-xl font-semibold">Cancel</a>' if manga_id else "",
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )


def _manga_card(m: dict) -> str:
    mid = str(m.get("id"))
    cover = f'<img src="{ui.esc(m["coverUrl"])}" alt="" class="w-full h-48 object-cover rounded-xl">' if m.get("coverUrl") else ""
    return (
        f'<div class="bg-white rounded-2xl shadow-sm border border-slate-100 p-4 space-y-2">{cover}'
        f'<div class="font-semibold">{ui.esc(m.get("title"))}</div>'
        f'<div class="text-xs text-slate-400">{ui.esc(m.get("status"))} &middot; {ui.esc(m.get("totalChapters", 0))} chapters &middot; {int(m.get("views") or 0):,} views</div>'
        f'<div class="flex gap-1"><a href="/admin/manga?edit={ui.esc(mid)}" class="{ui.SMALL_BUTTON_CLASS} bg-slate-100">Edit</a>'
        + ui.post_button(f"/admin/manga/{mid}/delete", "Delete", css="bg-red-50 text-red-600", confirm="Delete this manga?")
        + "</div></div>"
    )


@router.get("/manga", response_class=HTMLResponse)
def manga_page(edit: str | None = None, msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        manga, blob = fetch_parallel(ctx.client.get_all_manga, ctx.client.get_settings)
    except ApiError as e:
        log_event("manga_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Manga", "", error=e.message)

    manga = manga or []
    layout = AdminMangaLayout.from_blob(blob).admin_manga_layout
    editing = next((m for m in manga if str(m.get("id")) == edit), None) if edit else None

    layout_form = MANGA_LAYOUT_HTML.format(
        view_types=ui.options(MANGA_VIEW_TYPES, layout.get("viewType")),
        columns=ui.options(MANGA_COLUMNS, layout.get("columns")),
        card_sizes=ui.options(MANGA_CARD_SIZES, layout.get("cardSize")),
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )

    if layout.get("viewType") == "grid":
        listing = f'<div class="grid gap-4" style="grid-template-columns: repeat({parse_int(layout.get("columns"), 3)}, minmax(0, 1fr));">{"".join(_manga_card(m) for m in manga)}</div>'
        if not manga:
            listing = '<p class="text-slate-400">No manga yet</p>'
    else:
        rows = [
            f'<tr><td class="px-4 py-3 font-medium">{ui.esc(m.get("title"))}</td>'
            f'<td class="px-4 py-3">{ui.esc(m.get("status"))}</td>'
            f'<td class="px-4 py-3">{ui.esc(m.get("totalChapters", 0))}</td>'
            f'<td class="px-4 py-3">{int(m.get("views") or 0):,}</td>'
            f'<td class="px-4 py-3 space-x-1"><a href="/admin/manga?edit={ui.esc(m.get("id"))}" class="{ui.SMALL_BUTTON_CLASS} bg-slate-100">Edit</a>'
            + ui.post_button(f"/admin/manga/{m.get('id')}/delete", "Delete", css="bg-red-50 text-red-600", confirm="Delete this manga?")
            + "</td></tr>"
            for m in manga
        ]
        listing = ui.table(["Title", "Status", "Chapters", "Views", ""], rows, empty="No manga yet")

    form_title = f'Edit: {editing.get("title")}' if editing else "Add Manga"
    content = ui.card(layout_form, "Admin Layout") + ui.card(_manga_form(editing or {}, editing and str(editing.get("id"))), form_title) + listing
    return ui.page(ctx, "Manga", content, msg=msg, error=error)


def _manga_values(form: FormData) -> dict:
    data = {k: v for k, v in form.items()}
    for flag in ("showOnWeb", "showOnAndroid", "showOnIOS"):
        data[flag] = bool(form.get(flag))
    return data


@router.post("/manga")
def create_manga(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        manga = validate_manga(_manga_values(form))
        created = ctx.client.create_manga(manga.to_wire())
    except (ValidationError, ApiError) as e:
        return ui.redirect("/admin/manga", error=e.message)
    record_admin_action(ctx.client, ctx.user.id, "Created Manga", (created or {}).get("id"))
    return ui.redirect("/admin/manga", msg="Manga created")


@router.post("/manga/layout")
def save_manga_layout(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    view_type = form.get("viewType") if form.get("viewType") in dict(MANGA_VIEW_TYPES) else "grid"
    columns = parse_int(form.get("columns"), 3)
    if columns not in dict(MANGA_COLUMNS):
        columns = 3
    card_size = form.get("cardSize") if form.get("cardSize") in dict(MANGA_CARD_SIZES) else "medium"
    section = AdminMangaLayout(admin_manga_layout={"viewType": view_type, "columns": columns, "cardSize": card_size})
    try:
        section.save(ctx.client, ctx.user.id)
    except ApiError as e:
        return ui.redirect("/admin/manga", error=e.message)
    return ui.redirect("/admin/manga", msg="Layout saved")


@router.post("/manga/{manga_id}")
def update_manga(manga_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        manga = validate_manga(_manga_values(form))
        ctx.client.update_manga(manga_id, manga.to_wire())
    except (ValidationError, ApiError) as e:
        return ui.redirect(f"/admin/manga?edit={manga_id}", error=e.message)
    record_admin_action(ctx.client, ctx.user.id, "Updated Manga", manga_id)
    return ui.redirect("/admin/manga", msg="Manga updated")


@router.post("/manga/{manga_id}/delete")
def delete_manga(manga_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        ctx.client.delete_manga(manga_id)
    except ApiError as e:
        return ui.redirect("/admin/manga", error=e.message)
    record_admin_action(ctx.client, ctx.user.id, "Deleted Manga", manga_id)
    return ui.redirect("/admin/manga", msg="Manga deleted")
