import argparse
import logging
import sys

from kimage.errors import ClipboardError, ConfigError, UploadError

logger = logging.getLogger("kimage")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _upload_argparser():
    parser = argparse.ArgumentParser(
        prog="kimage",
        description="Upload an image to your kimage server and copy its URL.",
    )
    parser.add_argument("path", help="Path to the image file to upload.")
    parser.add_argument(
        "-v",
        "--verbose",
        help="Log progress to stderr.",
        action="store_true",
    )
    parser.add_argument(
        "--no-clipboard",
        help="Only print the URL, do not touch the clipboard.",
        action="store_true",
    )
    parser.add_argument(
        "--strict-clipboard",
        help="Exit non-zero when the URL cannot be copied to the clipboard.",
        action="store_true",
    )
    return parser


def _serve_argparser():
    parser = argparse.ArgumentParser(
        prog="kimage-serve",
        description="Run the kimage upload/serve HTTP server.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--host",
        help="Interface to bind.",
        default="0.0.0.0",
        type=str,
    )
    parser.add_argument(
        "--log-level",
        help="Logging level.",
        default="info",
        choices=["debug", "info", "warning", "error"],
        type=str,
    )
    return parser


def upload_main(argv=None) -> int:
    from kimage.client import copy_to_clipboard, upload
    from kimage.config import load_config

    args = _upload_argparser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        config = load_config()
        url = upload(args.path, config)
    except (ConfigError, UploadError) as e:
        print(f"kimage: {e}", file=sys.stderr)
        return 1

    if not args.no_clipboard:
        try:
            copy_to_clipboard(url)
        except ClipboardError as e:
            if args.strict_clipboard:
                print(f"kimage: {e}", file=sys.stderr)
                print(url)
                return 1
            logger.warning("could not copy URL to clipboard: %s", e)

    print(url)
    return 0


def serve_main(argv=None) -> int:
    import uvicorn

    from kimage.config import load_config
    from kimage.main import create_app
    from kimage.storage import check_writable

    args = _serve_argparser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    try:
        config = load_config()
    except ConfigError as e:
        print(f"kimage-serve: {e}", file=sys.stderr)
        return 1

    try:
        check_writable(config.storage_path, create=True)
    except OSError as e:
        print(f"kimage-serve: storage path {config.storage_path} is not writable: {e}", file=sys.stderr)
        return 1

    logger.info("serving %s on %s:%s", config.storage_path, args.host, config.port)
    uvicorn.run(create_app(config), host=args.host, port=config.port, log_level=args.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(upload_main())
