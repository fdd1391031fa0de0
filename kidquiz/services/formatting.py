"""Text for each screen, rendered from controller state (Telegram HTML)."""
import html
from datetime import datetime
from typing import List, Sequence
from zoneinfo import ZoneInfo

from kidquiz.config import settings
from kidquiz.models import UNANSWERED, Question, QuizData, QuizResult, Subject
from kidquiz.services.controller import QuizController
from kidquiz.services.scoring import FEEDBACK_MESSAGES, count_correct, feedback_tier

OPTION_LABELS = ("A", "B", "C", "D")
MESSAGE_LIMIT = 4000
HOME_RECENT = 3
HISTORY_LIMIT = 30
# Plain-text cap per review field; escaping can grow it up to 5x
REVIEW_FIELD_LIMIT = 600

SUBJECT_ICONS = {
    Subject.MATH: "🧮",
    Subject.VIETNAMESE: "📖",
}

STORE_MISSING_TEXT = (
    "⚠️ Chưa kết nối dữ liệu. Cấu hình SUPABASE_URL và SUPABASE_ANON_KEY "
    "để lưu lịch sử học tập."
)


def format_date(moment: datetime) -> str:
    local = moment.astimezone(ZoneInfo(settings.TIMEZONE))
    return local.strftime("%d/%m/%Y %H:%M")


def _result_line(result: QuizResult) -> str:
    icon = SUBJECT_ICONS.get(result.subject, "📝")
    return f"{icon} {result.subject.value} — <b>{result.score}</b>/100 · {format_date(result.date)}"


def format_home(controller: QuizController) -> str:
    lines = ["<b>⚡ Bé Vui Học - Lớp 2</b>", "Phiên bản Nâng Cao\n"]

    if controller.session.error:
        lines.append(f"❗ {html.escape(controller.session.error)}\n")
    if not controller.store_enabled:
        lines.append(STORE_MISSING_TEXT + "\n")

    lines.append("Chọn môn để thử thách ngay:\n")
    lines.append("<b>🕘 Lịch sử học tập</b>")
    if not controller.history:
        lines.append("Đang tải dữ liệu..." if controller.loading else "Bé chưa làm bài tập nào.")
    else:
        lines.extend(_result_line(r) for r in controller.history[:HOME_RECENT])
    return "\n".join(lines)


def format_generating(subject: Subject) -> str:
    return (
        f"⏳ Đang soạn đề {html.escape(subject.value)} nâng cao...\n\n"
        f"Bé chờ một chút nhé, việc này mất khoảng 20-40 giây."
    )


def format_question(controller: QuizController) -> str:
    """Current question of the Taking screen with progress and chosen option."""
    session = controller.session
    quiz = session.quiz
    index = controller.cursor
    question = quiz.questions[index]
    chosen = session.answers[index]
    total = len(quiz.questions)

    lines = [
        f"<b>{html.escape(quiz.subject.value)} (Nâng Cao)</b> · Đã làm {session.answered_count}/{total} câu",
        "",
        f"<b>Câu {question.id}.</b> {html.escape(question.question_text)}",
    ]
    if question.svg_image:
        lines.append("🖼 Câu này có hình minh họa.")
    lines.append("")
    for i, option in enumerate(question.options):
        marker = "🔵" if i == chosen else "⚪"
        lines.append(f"{marker} {OPTION_LABELS[i]}. {html.escape(option)}")

    lines.append("")
    if session.all_answered:
        lines.append("✅ Bé đã làm xong hết rồi!")
    else:
        lines.append("Bé hãy hoàn thành hết câu hỏi nhé!")
    return "\n".join(lines)


def format_result(quiz: QuizData, result: QuizResult) -> str:
    correct = count_correct(quiz.questions, result.user_answers)
    tier = feedback_tier(result.score)
    return (
        f"<b>📊 Kết quả môn {html.escape(result.subject.value)}</b>\n\n"
        f"Điểm: <b>{result.score}</b>/100\n"
        f"Đúng {correct}/{result.total_questions} câu\n\n"
        f"{FEEDBACK_MESSAGES[tier]}"
    )


def _clip(text: str, limit: int = REVIEW_FIELD_LIMIT) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


def format_review(question: Question, answer: int) -> str:
    """One question of the result review: correct option, child's option, explanation."""
    is_correct = answer == question.correct_answer_index
    icon = "✅" if is_correct else "❌"
    lines = [f"{icon} <b>Câu {question.id}.</b> {html.escape(_clip(question.question_text))}"]
    for i, option in enumerate(question.options):
        if i == question.correct_answer_index:
            mark = " ✔"
        elif i == answer:
            mark = " ✘"
        else:
            mark = ""
        lines.append(f"{OPTION_LABELS[i]}. {html.escape(_clip(option))}{mark}")
    if answer == UNANSWERED:
        lines.append("(Bé chưa trả lời câu này)")
    if question.explanation:
        lines.append(f"💡 {html.escape(_clip(question.explanation))}")
    return "\n".join(lines)


def format_review_messages(quiz: QuizData, answers: Sequence[int]) -> List[str]:
    blocks = [format_review(q, a) for q, a in zip(quiz.questions, answers)]
    return chunk_blocks(blocks)


def format_history(controller: QuizController) -> str:
    lines = ["<b>🕘 Lịch sử học tập</b>\n"]

    if not controller.store_enabled:
        lines.append("🔒 Chức năng quản lý bị khóa do chưa cấu hình kết nối dữ liệu.\n")
    if controller.loading:
        lines.append("⏳ Đang xử lý dữ liệu...\n")

    if not controller.history:
        if not controller.store_enabled:
            lines.append("Lịch sử tạm thời chỉ lưu trong phiên này vì chưa có kết nối dữ liệu.")
        else:
            lines.append("Chưa có dữ liệu lịch sử nào trên đám mây.")
    else:
        shown = controller.history[:HISTORY_LIMIT]
        lines.extend(f"{i}. {_result_line(r)}" for i, r in enumerate(shown, 1))
        hidden = len(controller.history) - len(shown)
        if hidden > 0:
            lines.append(f"... và {hidden} bài khác (xem trong file sao lưu).")

    if controller.store_enabled:
        lines.append("\n<i>*Dữ liệu được lưu trên đám mây theo thiết bị này.</i>")
    return "\n".join(lines)


def _split_lines(block: str, limit: int) -> List[str]:
    """Split an oversize block on line breaks; every line keeps its tags whole."""
    pieces: List[str] = []
    current = ""
    for line in block.split("\n"):
        candidate = f"{current}\n{line}" if current else line
        if current and len(candidate) > limit:
            pieces.append(current)
            current = line
        else:
            current = candidate
    if current:
        pieces.append(current)
    return pieces


def chunk_blocks(blocks: Sequence[str], limit: int = MESSAGE_LIMIT) -> List[str]:
    """Join blocks with blank lines into messages no longer than `limit`."""
    messages: List[str] = []
    current = ""
    for block in blocks:
        for piece in _split_lines(block, limit):
            candidate = f"{current}\n\n{piece}" if current else piece
            if len(candidate) <= limit:
                current = candidate
                continue
            if current:
                messages.append(current)
            current = piece
    if current:
        messages.append(current)
    return messages
