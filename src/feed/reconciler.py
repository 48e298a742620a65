"""
Feed Reconciler
-------------
Keeps an in-memory projection of the feed consistent with the remote store.
Every operation performs the remote write first and only then applies the
matching state transformation, so a failed write leaves the local list untouched.
"""
import logging
import uuid
from datetime import datetime

from src.errors import AppError, InvalidInputError, PermissionDenied, QuotaExceeded
from src.feed import state
from src.feed.quota import check_weekly_quota, quota_message
from src.feed.repository import FeedRepository
from src.models.feed import AuthorSummary, Comment, Like
from src.models.notice import Notice

PAGE_SIZE = 10

logger = logging.getLogger(__name__)


class FeedReconciler:
    def __init__(self, profile, repository=None, page_size=PAGE_SIZE, notify=None):
        self.profile = profile
        self.repository = repository or FeedRepository()
        self.page_size = page_size
        self.notify = notify
        self.posts = []
        self.page = 0
        self.notices = []

    def _emit(self, notice):
        self.notices.append(notice)
        if self.notify:
            self.notify(notice)

    def _fail(self, title, error):
        """Surface a failed operation as a destructive notice and re-raise it."""
        logger.error(f"{title}: {error}")
        self._emit(Notice.error(title, getattr(error, "description", None) or str(error)))
        raise error

    def drain_notices(self):
        notices, self.notices = self.notices, []
        return notices

    def get_post(self, post_id):
        return next((p for p in self.posts if p.id == post_id), None)

    def _require_owner_or_moderator(self, post_id):
        author_id = self.repository.get_post_author(post_id)
        if author_id != self.profile.id and not self.profile.can_moderate:
            raise PermissionDenied("Sem permissão", "Apenas o autor ou um moderador pode alterar este post.")

    # Loading

    def load_page(self, index, replace=False):
        try:
            page = self.repository.fetch_page(index, self.page_size)
        except AppError as e:
            self._fail("Erro ao carregar feed", e)

        self.posts = state.replace_post_list(page) if replace else state.append_page(self.posts, page)
        self.page = index
        logger.info(f"Loaded feed page {index} ({len(page)} posts, {len(self.posts)} in memory)")
        return page

    def load_more(self):
        return self.load_page(self.page + 1)

    # Posting

    def check_weekly_quota(self):
        return check_weekly_quota(self.repository, self.profile)

    def create_post(self, content, image_url=None):
        content = (content or "").strip()
        if not self.profile.is_active:
            raise PermissionDenied("Sem permissão", "Perfis inativos não podem publicar.")
        if not content and not image_url:
            self._emit(Notice(title="Conteúdo vazio", description="Escreva algo ou envie uma imagem."))
            raise InvalidInputError("Conteúdo vazio", "Escreva algo ou envie uma imagem.")

        if not self.check_weekly_quota():
            self._emit(Notice.error("Limite semanal atingido", quota_message(self.profile.role)))
            raise QuotaExceeded("Limite semanal atingido", quota_message(self.profile.role))

        try:
            post_id = self.repository.insert_post(self.profile.id, content, image_url)
        except AppError as e:
            self._fail("Erro ao publicar", e)

        self._emit(Notice(title="Publicado com sucesso!"))
        self.load_page(0, replace=True)
        return post_id

    # Interactions

    def toggle_like(self, post_id):
        """Like or unlike a post. Returns True when the post ends up liked."""
        user_id = self.profile.id
        try:
            existing = self.repository.find_like(post_id, user_id)
            if existing:
                self.repository.delete_like(existing)
            else:
                self.repository.insert_like(post_id, user_id)
        except AppError as e:
            self._fail("Erro ao curtir/descurtir", e)

        if existing:
            self.posts = state.remove_like(self.posts, post_id, user_id)
            return False

        like = Like(user_id=user_id, author=AuthorSummary.of(self.profile))
        self.posts = state.add_like(self.posts, post_id, like)
        return True

    def add_comment(self, post_id, text):
        text = (text or "").strip()
        if not text:
            return None

        try:
            self.repository.insert_comment(post_id, self.profile.id, text)
        except AppError as e:
            self._fail("Erro ao comentar", e)

        # The stored row id is not read back; the local copy gets its own.
        comment = Comment(
            id=str(uuid.uuid4()),
            post_id=post_id,
            author_id=self.profile.id,
            content=text,
            created_at=datetime.utcnow(),
            author=AuthorSummary.of(self.profile),
        )
        self.posts = state.append_comment(self.posts, post_id, comment)
        return comment

    def _require_comment_owner_or_moderator(self, comment_id):
        author_id = self.repository.get_comment_author(comment_id)
        if author_id != self.profile.id and not self.profile.can_moderate:
            raise PermissionDenied("Sem permissão", "Apenas o autor ou um moderador pode alterar este comentário.")

    def edit_comment(self, post_id, comment_id, text):
        """
        Replace the text of a stored comment. A comment appended by add_comment
        carries a local id until the next page-0 reload, so it is not found here.
        """
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("Comentário vazio")

        try:
            self._require_comment_owner_or_moderator(comment_id)
            self.repository.update_comment(comment_id, text)
        except PermissionDenied:
            raise
        except AppError as e:
            self._fail("Erro ao atualizar comentário", e)

        self.posts = state.replace_comment(self.posts, post_id, comment_id, text)
        self._emit(Notice(title="Comentário atualizado"))

    def delete_comment(self, post_id, comment_id):
        try:
            self._require_comment_owner_or_moderator(comment_id)
            self.repository.delete_comment(comment_id)
        except PermissionDenied:
            raise
        except AppError as e:
            self._fail("Erro ao excluir comentário", e)

        self.posts = state.remove_comment(self.posts, post_id, comment_id)
        self._emit(Notice(title="Comentário excluído"))

    # Moderation

    def edit_post(self, post_id, text):
        text = (text or "").strip()
        try:
            self._require_owner_or_moderator(post_id)
            self.repository.update_content(post_id, text)
        except PermissionDenied:
            raise
        except AppError as e:
            self._fail("Erro ao atualizar post", e)

        self.posts = state.replace_content(self.posts, post_id, text)
        self._emit(Notice(title="Post atualizado"))

    def delete_post(self, post_id):
        try:
            self._require_owner_or_moderator(post_id)
            self.repository.delete_post(post_id)
        except PermissionDenied:
            raise
        except AppError as e:
            self._fail("Erro ao excluir post", e)

        self.posts = state.remove_post(self.posts, post_id)
        self._emit(Notice(title="Post excluído"))

    def toggle_pin(self, post_id, pinned):
        if not self.profile.can_moderate:
            raise PermissionDenied("Sem permissão", "Apenas líderes e administradores podem fixar posts.")

        try:
            self.repository.set_pinned(post_id, pinned)
        except AppError as e:
            self._fail("Erro ao atualizar mural", e)

        self.posts = state.set_pinned(self.posts, post_id, pinned)
        self._emit(Notice(title="Fixado no mural" if pinned else "Removido do mural"))
