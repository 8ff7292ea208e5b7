#!/usr/bin/env python3
"""
CLI Transliteration Tool.

Transliterate romanized words into an Indic script.

Usage:
    python scripts/transliterate.py --word amma --lang ta
    python scripts/transliterate.py --file words.txt --lang hi --output out.tsv
    python scripts/transliterate.py --interactive --lang ml --count 3
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.xlit.config import DecodingConfig, RescoringConfig, XlitConfig
from src.xlit.errors import XlitError
from src.xlit.inference import Transliterator


def parse_args():
    parser = argparse.ArgumentParser(description="Transliterate romanized words")
    
    # Model
    parser.add_argument("--model-dir", type=str, default="models/xlit",
                       help="Directory with vocab.json and scripted encoder/decoder")
    parser.add_argument("--dictionary-dir", type=str, default=None,
                       help="Directory for word probability dictionaries")
    
    # Input
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("--word", type=str,
                            help="Word to transliterate")
    input_group.add_argument("--file", type=str,
                            help="File with words to transliterate (one per line)")
    input_group.add_argument("--interactive", action="store_true",
                            help="Interactive mode")
    
    # Output
    parser.add_argument("--output", type=str, default=None,
                       help="Output TSV file (word, candidates...)")
    
    # Decoding
    parser.add_argument("--lang", type=str, default="hi",
                       help="Target language code")
    parser.add_argument("--count", type=int, default=5,
                       help="Number of candidates per word")
    parser.add_argument("--beam-width", type=int, default=4,
                       help="Beam width")
    parser.add_argument("--max-length", type=int, default=20,
                       help="Maximum output length")
    parser.add_argument("--timeout", type=float, default=None,
                       help="Seconds allowed per word")
    
    # Rescoring
    parser.add_argument("--rescore", action="store_true",
                       help="Re-rank with the word probability dictionary")
    parser.add_argument("--alpha", type=float, default=0.9,
                       help="Model weight for dictionary interpolation")
    
    # Device
    parser.add_argument("--device", type=str, default="cpu",
                       help="Device (cuda, cpu)")
    
    return parser.parse_args()


def load_transliterator(args) -> Transliterator:
    """Create a session from command line arguments."""
    model_dir = Path(args.model_dir)
    dictionary_dir = Path(args.dictionary_dir) if args.dictionary_dir else model_dir / "dictionaries"
    
    config = XlitConfig(
        decoding=DecodingConfig(
            beam_width=args.beam_width,
            max_length=args.max_length,
            timeout=args.timeout
        ),
        rescoring=RescoringConfig(enabled=args.rescore, alpha=args.alpha),
        model_dir=model_dir,
        dictionary_dir=dictionary_dir,
        device=args.device
    )
    
    transliterator = Transliterator(config=config)
    transliterator.initialize()
    return transliterator


def transliterate_word(args):
    """Transliterate a single word."""
    with load_transliterator(args) as transliterator:
        results = transliterator.transliterate_scored(args.word, args.lang, args.count)
    
    print(f"\nInput ({args.word}) → {args.lang}:")
    for rank, item in enumerate(results, 1):
        print(f"  {rank}. {item.word}\t{item.score:.4f}")


def transliterate_file(args):
    """Transliterate words from a file."""
    with open(args.file, 'r', encoding='utf-8') as f:
        words = [line.strip() for line in f if line.strip()]
    
    print(f"Transliterating {len(words)} words...")
    
    with load_transliterator(args) as transliterator:
        results = transliterator.transliterate_batch(words, args.lang, args.count)
    
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            for word, candidates in zip(words, results):
                f.write("\t".join([word] + candidates) + '\n')
        print(f"Results saved to {args.output}")
    else:
        for word, candidates in zip(words, results):
            print(f"[SRC] {word}")
            print(f"[TGT] {', '.join(candidates)}")
            print()


def interactive_mode(args):
    """Interactive transliteration."""
    transliterator = load_transliterator(args)
    
    print("\n" + "=" * 50)
    print("Interactive Transliteration")
    print(f"  en → {args.lang}")
    print(f"  Beam width: {args.beam_width}")
    print(f"  Rescoring: {'on' if args.rescore else 'off'}")
    print("=" * 50)
    print("Enter a word to transliterate. Type 'quit' to exit.\n")
    
    try:
        while True:
            try:
                word = input("[en] > ").strip()
                
                if not word:
                    continue
                if word.lower() in ('quit', 'exit', 'q'):
                    print("Goodbye!")
                    break
                
                results = transliterator.transliterate(word, args.lang, args.count)
                print(f"[{args.lang}] > {', '.join(results)}\n")
                
            except KeyboardInterrupt:
                print("\nGoodbye!")
                break
            except XlitError as e:
                print(f"Error: {e}")
    finally:
        transliterator.dispose()


def main():
    args = parse_args()
    
    if args.word:
        transliterate_word(args)
    elif args.file:
        transliterate_file(args)
    elif args.interactive:
        interactive_mode(args)


if __name__ == "__main__":
    main()
