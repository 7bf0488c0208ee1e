import os
import sys
import time
import queue
import argparse
import io
from dataclasses import dataclass
from concurrent.futures import ThreadPoolExecutor

from ascii_converter import ImageDecodeError, load_image, process_frame
from frame_config import DEFAULT_FONT_SIZE, DEFAULT_FRAME_RATE, DEFAULT_PICS_DIR, FrameConfig

_CLOSED = object()


class DirectoryReadError(Exception):
    pass


@dataclass(frozen=True)
class Frame:
    index: int
    source: str
    text: str


@dataclass
class PlaybackStats:
    entries: int = 0
    loaded: int = 0
    skipped: int = 0
    printed: int = 0
    elapsed: float = 0.0


class ASCIIFramePlayer:
    def __init__(self, config, out=None):
        self.config = config
        self.out = out if out is not None else sys.stdout
        self.stats = PlaybackStats()

    def list_entries(self):
        try:
            with os.scandir(self.config.pics_dir) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            raise DirectoryReadError(str(e)) from e
        return [entry.path for entry in entries if not entry.is_dir()]

    def load_frames(self, paths):
        images = []
        for path in paths:
            try:
                images.append(load_image(path))
            except ImageDecodeError:
                self.stats.skipped += 1
                continue
        self.stats.loaded = len(images)
        return images

    def render_frame(self, index, image, channel):
        channel.put(Frame(index=index, source=image.source, text=process_frame(image, self.config)))

    def dispatch(self, images, channel):
        futures = []
        try:
            with ThreadPoolExecutor(max_workers=self.config.worker_count(len(images))) as executor:
                for index, image in enumerate(images):
                    futures.append(executor.submit(self.render_frame, index, image, channel))
                    time.sleep(self.config.frame_delay)
        finally:
            channel.put(_CLOSED)
        for future in futures:
            future.result()

    def emit(self, frame):
        self.out.write(frame.text)
        self.out.flush()
        self.stats.printed += 1

    def drain(self, channel):
        pending = {}
        next_index = 0
        while True:
            frame = channel.get()
            if frame is _CLOSED:
                break
            if not self.config.ordered:
                self.emit(frame)
                continue
            pending[frame.index] = frame
            while next_index in pending:
                self.emit(pending.pop(next_index))
                next_index += 1
        # Only reached with gaps when a render failed; dispatch re-raises it.
        for index in sorted(pending):
            self.emit(pending[index])

    def play(self):
        start_time = time.time()
        paths = self.list_entries()
        self.stats.entries = len(paths)
        images = self.load_frames(paths)
        channel = queue.Queue()
        with ThreadPoolExecutor(max_workers=1) as dispatcher:
            dispatched = dispatcher.submit(self.dispatch, images, channel)
            self.drain(channel)
            dispatched.result()
        self.stats.elapsed = time.time() - start_time
        return self.stats


def print_stats(stats, file=None):
    file = file if file is not None else sys.stderr
    print("\n=== Conversion Statistics ===", file=file)
    print(f"Total time: {stats.elapsed:.2f} seconds", file=file)
    print(f"Directory entries: {stats.entries}", file=file)
    print(f"Frames loaded: {stats.loaded}", file=file)
    print(f"Entries skipped: {stats.skipped}", file=file)
    print(f"Frames printed: {stats.printed}", file=file)
    if stats.elapsed > 0:
        print(f"Processing speed: {stats.printed/stats.elapsed:.1f} frames/second", file=file)


def positive_int(value):
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(description='Print a directory of images as ASCII frames')
    parser.add_argument('pics_dir', nargs='?', default=DEFAULT_PICS_DIR,
                        help=f'Directory of still images (default: {DEFAULT_PICS_DIR})')
    parser.add_argument('-r', '--frame-rate', type=positive_int, default=DEFAULT_FRAME_RATE,
                        help=f'Frames per second, sets the delay between render launches (default: {DEFAULT_FRAME_RATE})')
    parser.add_argument('-f', '--font-size', type=positive_int, default=DEFAULT_FONT_SIZE,
                        help=f'Pixels per character along each axis (default: {DEFAULT_FONT_SIZE})')
    parser.add_argument('-j', '--workers', type=positive_int,
                        help='Render worker threads (default: one per frame)')
    parser.add_argument('--unordered', action='store_true',
                        help='Print frames as soon as they finish instead of in file order')
    parser.add_argument('--stats', action='store_true', help='Print conversion statistics to stderr')
    return parser


def config_from_args(args):
    return FrameConfig(
        pics_dir=args.pics_dir,
        frame_rate=args.frame_rate,
        font_size=args.font_size,
        ordered=not args.unordered,
        workers=args.workers,
    )


def silence_stdout():
    # Python flushes stdout again at exit; point it at devnull so a closed pipe stays quiet.
    try:
        fileno = sys.stdout.fileno()
    except (AttributeError, io.UnsupportedOperation):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fileno)


def main(argv=None):
    args = build_parser().parse_args(argv)
    player = ASCIIFramePlayer(config_from_args(args))
    try:
        stats = player.play()
    except DirectoryReadError as e:
        print(f"Error reading directory: {e}", file=sys.stderr)
        return 0
    except BrokenPipeError:
        silence_stdout()
        return 1
    if args.stats:
        print_stats(stats)
    return 0


if __name__ == "__main__":
    sys.exit(main())
