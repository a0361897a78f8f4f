"""
Module quản lý thư viện bài nghe dùng chung.

Trách nhiệm:
    - Giữ số bài trong thư viện đạt mục tiêu (tạo bù từng bài một, tuần tự).
    - Loại bỏ các bài có tổng điểm đánh giá thấp hơn ngưỡng.
    - Chọn bài tiếp theo cho từng chat: lần lượt các bài chưa nghe theo track_id,
      khi đã nghe hết thì bắt đầu vòng mới.

Các thao tác chặn (truy vấn DB, gọi Gemini, Google TTS, ffmpeg) của chu trình
bảo trì được đẩy sang executor mặc định để không chặn event loop của bot.
"""
import os
import asyncio
import logging

from vocab_audio_bot.database.query_track import (
    add_track,
    delete_track,
    get_all_tracks,
    get_track_count,
)
from vocab_audio_bot.database.query_history import (
    clear_listen_history,
    get_next_unlistened_track,
    get_oldest_listened_track,
)
from vocab_audio_bot.database.query_feedback import get_tracks_below_score
from vocab_audio_bot.services.audio_service import remove_file_quietly
from vocab_audio_bot.utils.exceptions import MissingAudioFileError

logger = logging.getLogger(__name__)


class AudioLibrary:
    """
    Args:
        script_generator: Đối tượng có phương thức generate(...) trả về danh sách cặp từ.
        renderer: Đối tượng có phương thức render(pairs, pause_think, pause_between, output_dir).
        audio_dir (str): Thư mục lưu file audio của thư viện.
        target_size (int): Số bài mục tiêu.
        items_per_track (int): Số cặp từ mỗi bài.
        level (str): Trình độ ngôn ngữ.
        pause_think (float): Khoảng nghỉ sau từ nguồn (giây).
        pause_between (float): Khoảng nghỉ giữa các cặp (giây).
        source_language (dict): {'name', 'voice_name', ...}.
        target_language (dict): {'name', 'voice_name', ...}.
        low_score_threshold (int): Bài có tổng điểm < ngưỡng sẽ bị xóa.
    """

    def __init__(self, script_generator, renderer, audio_dir, target_size, items_per_track,
                 level, pause_think, pause_between, source_language, target_language,
                 low_score_threshold):
        self.script_generator = script_generator
        self.renderer = renderer
        self.audio_dir = audio_dir
        self.target_size = target_size
        self.items_per_track = items_per_track
        self.level = level
        self.pause_think = pause_think
        self.pause_between = pause_between
        self.source_language = source_language
        self.target_language = target_language
        self.low_score_threshold = low_score_threshold
        os.makedirs(self.audio_dir, exist_ok=True)
        logger.info(f"AudioLibrary khởi tạo: thư mục '{audio_dir}', mục tiêu {target_size} bài, ngưỡng điểm {low_score_threshold}.")

    def get_track_count(self):
        return get_track_count()

    def _collect_avoid_list(self):
        """Toàn bộ từ nguồn của mọi bài hiện có (không giới hạn cửa sổ)."""
        words = []
        for track in get_all_tracks():
            words.extend(pair['source'] for pair in track['pairs'])
        return words

    def _generate_single_track_sync(self):
        """
        Sinh một bài mới: kịch bản -> audio -> lưu DB. Chạy đồng bộ (trong executor).
        Nếu lưu DB thất bại thì xóa file audio vừa tạo để không để lại file mồ côi.
        Returns:
            int: track_id của bài mới.
        """
        pairs = self.script_generator.generate(
            items_per_track=self.items_per_track,
            level=self.level,
            recent_avoid_list=self._collect_avoid_list(),
            source_lang_name=self.source_language['name'],
            target_lang_name=self.target_language['name'],
        )
        file_path = self.renderer.render(pairs, self.pause_think, self.pause_between, self.audio_dir)
        try:
            return add_track(file_path, pairs)
        except Exception:
            remove_file_quietly(file_path, "[LIBRARY_ORPHAN_CLEANUP]")
            raise

    async def ensure_library_size(self):
        """
        Tạo bù cho đủ số bài mục tiêu. Mỗi lần tạo độc lập: lỗi của một bài
        được ghi log và bỏ qua, không dừng cả vòng lặp.
        Returns:
            int: Số bài đã tạo thành công (có thể nhỏ hơn số bài thiếu).
        """
        log_prefix = "[LIBRARY_ENSURE_SIZE]"
        loop = asyncio.get_running_loop()
        current_count = await loop.run_in_executor(None, get_track_count)
        needed = self.target_size - current_count
        if needed <= 0:
            logger.info(f"{log_prefix} Thư viện có {current_count} bài, không cần tạo thêm.")
            return 0
        logger.info(f"{log_prefix} Thư viện có {current_count}/{self.target_size} bài. Sẽ tạo {needed} bài.")
        generated = 0
        for attempt in range(1, needed + 1):
            try:
                track_id = await loop.run_in_executor(None, self._generate_single_track_sync)
                generated += 1
                logger.info(f"{log_prefix} Đã tạo bài ID {track_id} ({attempt}/{needed}).")
            except Exception as e:
                logger.error(f"{log_prefix} Tạo bài {attempt}/{needed} thất bại: {e}", exc_info=True)
        logger.info(f"{log_prefix} Hoàn tất: tạo thành công {generated}/{needed} bài.")
        return generated

    def _delete_track_with_file(self, track):
        remove_file_quietly(track['file_path'], "[LIBRARY_DELETE_FILE]")
        return delete_track(track['track_id'])

    async def cleanup_low_score_tracks(self):
        """
        Xóa các bài có tổng điểm < ngưỡng, bất kể tuổi hay kích thước thư viện.
        Returns:
            int: Số bài đã bị loại.
        """
        log_prefix = "[LIBRARY_CLEANUP]"
        loop = asyncio.get_running_loop()
        low_score_tracks = await loop.run_in_executor(None, get_tracks_below_score, self.low_score_threshold)
        if not low_score_tracks:
            logger.info(f"{log_prefix} Không có bài nào dưới ngưỡng {self.low_score_threshold}.")
            return 0
        logger.info(f"{log_prefix} Loại {len(low_score_tracks)} bài có điểm < {self.low_score_threshold}...")
        for track in low_score_tracks:
            await loop.run_in_executor(None, self._delete_track_with_file, track)
            logger.info(f"{log_prefix} Đã loại bài ID {track['track_id']}.")
        return len(low_score_tracks)

    async def run_maintenance(self):
        """Chu trình bảo trì: loại bài điểm thấp trước, sau đó tạo bù."""
        logger.info("[LIBRARY_MAINTENANCE] Bắt đầu bảo trì thư viện...")
        deleted = await self.cleanup_low_score_tracks()
        generated = await self.ensure_library_size()
        logger.info(f"[LIBRARY_MAINTENANCE] Hoàn tất: đã xóa {deleted}, đã tạo {generated}.")
        return {'deleted': deleted, 'generated': generated}

    def get_next_track_for_user(self, chat_id):
        """
        Chọn bài tiếp theo cho chat. Không có tác dụng phụ nào ngoài việc xóa
        lịch sử khi bắt đầu vòng mới; bên gọi chịu trách nhiệm mark_listened.
            1. Bài chưa nghe có track_id nhỏ nhất.
            2. Đã nghe hết: lấy bài nghe lâu nhất TRƯỚC khi xóa lịch sử, rồi xóa lịch sử.
            3. Không có gì: bài đầu tiên theo track_id, hoặc None nếu thư viện rỗng.
        """
        log_prefix = f"[LIBRARY_NEXT|Chat:{chat_id}]"
        track = get_next_unlistened_track(chat_id)
        if track:
            logger.debug(f"{log_prefix} Bài chưa nghe: ID {track['track_id']}.")
            return track
        # Hai bước này không nguyên tử theo chat: hai yêu cầu đồng thời ở cuối vòng
        # có thể cùng nhận một bài. Chấp nhận được với mô hình một tiến trình ghi.
        oldest = get_oldest_listened_track(chat_id)
        clear_listen_history(chat_id)
        if oldest:
            logger.info(f"{log_prefix} Đã nghe hết thư viện. Bắt đầu vòng mới từ bài ID {oldest['track_id']}.")
            return oldest
        all_tracks = get_all_tracks()
        if all_tracks:
            logger.info(f"{log_prefix} Không có lịch sử nghe. Dùng bài đầu tiên ID {all_tracks[0]['track_id']}.")
            return all_tracks[0]
        logger.info(f"{log_prefix} Thư viện đang rỗng.")
        return None

    def ensure_track_file(self, track):
        """
        Kiểm tra file audio của bài còn tồn tại. Nếu mất, xóa bản ghi và báo lỗi.
        Raises:
            MissingAudioFileError: Khi file audio không còn trên đĩa.
        """
        if os.path.exists(track['file_path']):
            return track
        logger.warning(f"[LIBRARY_MISSING_FILE|Track:{track['track_id']}] File không tồn tại: {track['file_path']}. Xóa bản ghi.")
        delete_track(track['track_id'])
        raise MissingAudioFileError(track_id=track['track_id'], file_path=track['file_path'])

